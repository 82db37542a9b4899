"""Consistency checks across the room, anchor and element tables."""

from sisustus.config import (
    ACCESSORY_ELEMENT_KEYS,
    ANCHOR_ELEMENT_KEYS,
    ANCHOR_OPTIONS,
    AUTO_ANCHOR_LABEL,
    ELEMENT_SPECS,
    ROOM_MENUS,
)


class TestTables:
    def test_rooms_have_anchor_options(self):
        assert set(ANCHOR_OPTIONS) == set(ROOM_MENUS)

    def test_anchor_labels_resolve_to_elements(self):
        for room, labels in ANCHOR_OPTIONS.items():
            assert labels[-1] == AUTO_ANCHOR_LABEL, room
            for label in labels[:-1]:
                assert ANCHOR_ELEMENT_KEYS[label] in ELEMENT_SPECS

    def test_room_elements_are_known(self):
        for room, menu in ROOM_MENUS.items():
            for key in menu["elements"].values():
                assert key in ELEMENT_SPECS, f"{room}: {key}"

    def test_accessories_are_elements(self):
        assert ACCESSORY_ELEMENT_KEYS <= set(ELEMENT_SPECS)
