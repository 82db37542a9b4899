"""
Room-scoped candidate pools for the bundle builder.

Maps room menu selections onto furniture element keys (ELEMENT_SPECS) and
narrows the catalog to products that plausibly belong in the room: the
anchor's element first, then every selected element, then the room's own
category slugs and finally the legacy room keywords.
"""

from __future__ import annotations

import logging

from sisustus.config import (
    ANCHOR_ELEMENT_KEYS,
    AUTO_ANCHOR_LABEL,
    ELEMENT_FOCUS_LIMIT,
    ELEMENT_SPECS,
    ROOM_KEYWORDS,
    ROOM_MENUS,
    ROOM_POOL_LIMIT,
    ROOM_POOL_MIN_SIZE,
)
from sisustus.models.product import ProductCard
from sisustus.services.text import normalize_text

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Element matching
# ---------------------------------------------------------------------------

def card_text(card: ProductCard) -> str:
    """Normalised title, handle and category names."""
    return normalize_text(" ".join([card.title, card.handle, *card.category_names]))


def element_slug_hits(card: ProductCard, element_key: str) -> int:
    slugs = set(ELEMENT_SPECS.get(element_key, {}).get("slugs", []))
    return len(slugs.intersection(card.category_slugs))


def matches_element_keywords(card: ProductCard, element_key: str, text: str | None = None) -> bool:
    text = card_text(card) if text is None else text
    keywords = ELEMENT_SPECS.get(element_key, {}).get("keywords", [])
    return any(normalize_text(keyword) in text for keyword in keywords)


def matches_element(card: ProductCard, element_key: str) -> bool:
    return element_slug_hits(card, element_key) > 0 or matches_element_keywords(card, element_key)


def infer_element_key(card: ProductCard) -> str | None:
    """Best-guess element key for *card*: category slugs first, then keywords."""
    for key in ELEMENT_SPECS:
        if element_slug_hits(card, key):
            return key
    text = card_text(card)
    for key in ELEMENT_SPECS:
        if matches_element_keywords(card, key, text):
            return key
    return None


def resolve_element_key(room: str | None, element: str) -> str | None:
    """Element key for a selected element label.

    Tries the room menu (exact, then normalised label), then a raw element
    key, then the element keywords.
    """
    elements: dict[str, str] = ROOM_MENUS.get(room or "", {}).get("elements", {})
    if element in elements:
        return elements[element]

    normalized = normalize_text(element)
    for label, key in elements.items():
        if normalize_text(label) == normalized:
            return key

    if element in ELEMENT_SPECS:
        return element

    if not normalized:
        return None
    for key, spec in ELEMENT_SPECS.items():
        for keyword in spec["keywords"]:
            needle = normalize_text(keyword)
            if needle and (needle in normalized or normalized in needle):
                return key
    return None


def resolve_selected_keys(room: str | None, selected_elements: list[str]) -> list[str]:
    """De-duplicated element keys for the selected elements (unknown ones dropped)."""
    keys: list[str] = []
    for element in selected_elements:
        key = resolve_element_key(room, element)
        if key and key not in keys:
            keys.append(key)
    return keys


def anchor_element_key(anchor_product: str | None) -> str | None:
    if not anchor_product or anchor_product == AUTO_ANCHOR_LABEL:
        return None
    return ANCHOR_ELEMENT_KEYS.get(anchor_product)


def element_focused_pool(catalog: list[ProductCard], element_key: str) -> list[ProductCard]:
    """All products of the whole catalog matching one element."""
    return [card for card in catalog if matches_element(card, element_key)]


# ---------------------------------------------------------------------------
# Room pool
# ---------------------------------------------------------------------------

def _room_keyword_match(card: ProductCard, keywords: list[str]) -> bool:
    text = normalize_text(" ".join([card.title, *card.category_names, card.description]))
    return any(normalize_text(keyword) in text for keyword in keywords)


def filter_catalog_for_room(
    catalog: list[ProductCard],
    room: str | None,
    selected_elements: list[str],
    anchor_product: str | None = None,
) -> list[ProductCard]:
    """Room-relevant slice of *catalog*, most specific matches first.

    Layers, concatenated in order and de-duplicated by id:
        (a) products matching the anchor element
        (b) per selected element, at most ELEMENT_FOCUS_LIMIT matches
        (c) products matching any selected element
        (d) products in one of the room's allowed category slugs
        (e) products matching the legacy room keywords
    Products in an excluded category are dropped unless they also carry a
    protected slug (allowed, selected element or anchor). Falls back to the
    unfiltered catalog head when fewer than ROOM_POOL_MIN_SIZE remain.
    """
    menu = ROOM_MENUS.get(room or "", {})
    allowed = set(menu.get("allowed_slugs", []))
    excluded = set(menu.get("excluded_slugs", []))
    selected_keys = resolve_selected_keys(room, selected_elements)
    anchor_key = anchor_element_key(anchor_product)

    protected = set(allowed)
    for key in [*selected_keys, *([anchor_key] if anchor_key else [])]:
        protected.update(ELEMENT_SPECS.get(key, {}).get("slugs", []))

    layers: list[list[ProductCard]] = []
    if anchor_key:
        layers.append(element_focused_pool(catalog, anchor_key))
    for key in selected_keys:
        layers.append(element_focused_pool(catalog, key)[:ELEMENT_FOCUS_LIMIT])
    if selected_keys:
        layers.append([card for card in catalog if any(matches_element(card, key) for key in selected_keys)])
    if allowed:
        layers.append([card for card in catalog if allowed.intersection(card.category_slugs)])
    room_keywords = ROOM_KEYWORDS.get(room or "", [])
    if room_keywords:
        layers.append([card for card in catalog if _room_keyword_match(card, room_keywords)])

    seen: set[str] = set()
    pool: list[ProductCard] = []
    for layer in layers:
        for card in layer:
            if card.id in seen:
                continue
            seen.add(card.id)
            slugs = set(card.category_slugs)
            if slugs & excluded and not slugs & protected:
                continue
            pool.append(card)

    if len(pool) < ROOM_POOL_MIN_SIZE:
        logger.info("[bundler] Room pool for %r too small (%d), using catalog head", room, len(pool))
        return catalog[:ROOM_POOL_LIMIT]
    return pool[:ROOM_POOL_LIMIT]
