"""Tests for room pools and bundle assembly."""

import pytest
from conftest import ScriptedAssist, make_candidate

from sisustus.models.bundle import BundleAnswers, item_from_card
from sisustus.models.product import parse_price
from sisustus.services.bundler import (
    AUTO_ANCHOR_WHY,
    STRICT_BUNDLE_TITLE,
    assemble_bundles,
    rank_alternatives,
    score_for_element,
)
from sisustus.services.room_filter import filter_catalog_for_room, infer_element_key, resolve_element_key


@pytest.fixture
def bedroom_answers() -> BundleAnswers:
    return BundleAnswers(
        room="Magamistuba",
        anchor_product="Voodi",
        budget_range="2000-4000",
        style="Modern",
        selected_elements=["Voodi", "Öökapp", "Kummut"],
    )


class TestRoomFilter:
    def test_resolve_element_key(self):
        assert resolve_element_key("Magamistuba", "Voodi") == "bed"
        assert resolve_element_key("Magamistuba", "voodi") == "bed"
        assert resolve_element_key(None, "rug") == "rug"
        assert resolve_element_key(None, "Valge peegel") == "mirror"
        assert resolve_element_key("Magamistuba", "Akvaarium") is None

    def test_infer_element_key_prefers_slugs(self):
        card = make_candidate("1", "Diivanvoodi Luna", slugs=["diivanid"]).to_card()
        assert infer_element_key(card) == "sofa"

    def test_room_pool_drops_excluded_categories(self, bedroom_catalog):
        cards = [product.to_card() for product in bedroom_catalog]
        pool = filter_catalog_for_room(cards, "Magamistuba", ["Voodi"], "Voodi")
        ids = [card.id for card in pool]
        assert "9" not in ids
        assert ids[:3] == ["1", "2", "10"]

    def test_small_pool_falls_back_to_catalog(self, bedroom_catalog):
        cards = [product.to_card() for product in bedroom_catalog]
        pool = filter_catalog_for_room(cards, "Esik", [])
        assert len(pool) == len(cards)

    def test_selected_element_protects_excluded_category(self, bedroom_catalog):
        bistro = make_candidate("11", "Öökapp Bistro", 110, slugs=["oo-kapid", "soogilauad"])
        cards = [product.to_card() for product in [*bedroom_catalog, bistro]]

        protected = filter_catalog_for_room(cards, "Magamistuba", ["Öökapp"])
        unprotected = filter_catalog_for_room(cards, "Magamistuba", ["Voodi"])

        assert "11" in {card.id for card in protected}
        assert "11" not in {card.id for card in unprotected}

    def test_element_layer_capped_per_element(self):
        nightstands = [
            make_candidate(f"n{i}", f"Öökapp Nr {i}", slugs=["ookapid"]).to_card() for i in range(1, 16)
        ]
        dressers = [make_candidate(f"d{i}", f"Kummut Nr {i}", slugs=["kummutid"]).to_card() for i in range(1, 3)]
        pool = filter_catalog_for_room([*nightstands, *dressers], "Magamistuba", ["Öökapp", "Kummut"])

        expected = [f"n{i}" for i in range(1, 13)] + ["d1", "d2"] + [f"n{i}" for i in range(13, 16)]
        assert [card.id for card in pool] == expected


class TestElementScore:
    def test_sofa_bed_never_scores_as_bed(self, bedroom_catalog):
        sofa_bed = bedroom_catalog[0].to_card()
        true_bed = bedroom_catalog[1].to_card()
        assert score_for_element(sofa_bed, "bed") <= 0
        assert score_for_element(true_bed, "bed") == 28 + 10 + 12


class TestAssembleBundles:
    def test_bedroom_scenario(self, bedroom_catalog, bedroom_answers):
        bundles = assemble_bundles(bedroom_answers, bedroom_catalog)
        strict = bundles[0]

        assert strict.title == STRICT_BUNDLE_TITLE
        assert [item.element_key for item in strict.items] == ["bed", "nightstand", "dresser"]
        assert strict.items[0].id == "2"
        assert strict.items[0].role_in_bundle == "ankur"
        assert all(item.role_in_bundle == "lisatoode" for item in strict.items[1:])
        assert not strict.tradeoffs

    def test_at_most_three_distinct_bundles(self, bedroom_catalog, bedroom_answers):
        bundles = assemble_bundles(bedroom_answers, bedroom_catalog)
        assert 1 <= len(bundles) <= 3
        signatures = [bundle.signature() for bundle in bundles]
        assert len(signatures) == len(set(signatures))

    def test_items_unique_within_bundle(self, bedroom_catalog, bedroom_answers):
        for bundle in assemble_bundles(bedroom_answers, bedroom_catalog):
            ids = [item.id for item in bundle.items]
            assert len(ids) == len(set(ids))

    def test_total_is_sum_of_displayed_prices(self, bedroom_catalog, bedroom_answers):
        for bundle in assemble_bundles(bedroom_answers, bedroom_catalog):
            assert bundle.total_price == pytest.approx(sum(parse_price(item.price) for item in bundle.items))

    def test_total_invariant_under_removal(self, bedroom_catalog, bedroom_answers):
        bundle = assemble_bundles(bedroom_answers, bedroom_catalog)[0]
        before = bundle.total_price
        removed = bundle.remove_item("3")
        assert removed is not None
        assert bundle.total_price == pytest.approx(before - parse_price(removed.price))

    def test_replace_item_keeps_slot_and_rederives_total(self, bedroom_catalog, bedroom_answers):
        bundle = assemble_bundles(bedroom_answers, bedroom_catalog)[0]
        siri = bedroom_catalog[3].to_card()
        assert bundle.total_price == 1350

        swapped = bundle.replace_item("3", siri)

        assert swapped is not None
        assert [item.id for item in bundle.items] == ["2", "4", "5"]
        assert swapped.role_in_bundle == "lisatoode"
        assert swapped.element_key == "nightstand"
        assert bundle.total_price == 1325

    def test_replace_item_rejects_duplicates_and_unknown_ids(self, bedroom_catalog, bedroom_answers):
        bundle = assemble_bundles(bedroom_answers, bedroom_catalog)[0]
        dresser = bedroom_catalog[4].to_card()
        assert bundle.replace_item("3", dresser) is None
        assert bundle.replace_item("nope", bedroom_catalog[3].to_card()) is None
        assert bundle.total_price == 1350

    def test_budget_overage_tradeoff(self, bedroom_catalog, bedroom_answers):
        answers = bedroom_answers.model_copy(update={"budget_range": "custom", "budget_custom": 1000})
        strict = assemble_bundles(answers, bedroom_catalog)[0]
        assert strict.total_price == 1350
        assert "Koguhind ületab eelarve 350€ võrra" in strict.tradeoffs

    def test_auto_anchor_promotes_first_non_accessory(self, bedroom_catalog):
        answers = BundleAnswers(
            room="Magamistuba",
            anchor_product="Bot vali ise",
            budget_range="2000-4000",
            style="Modern",
            selected_elements=["Vaip", "Kummut"],
        )
        strict = assemble_bundles(answers, bedroom_catalog)[0]
        assert strict.items[0].element_key == "dresser"
        assert strict.items[0].role_in_bundle == "ankur"
        assert strict.items[0].why_chosen == AUTO_ANCHOR_WHY
        assert strict.items[1].role_in_bundle == "aksessuaar"

    def test_unresolved_elements_become_tradeoffs(self, bedroom_catalog):
        answers = BundleAnswers(
            room="Magamistuba",
            budget_range="2000-4000",
            style="Modern",
            selected_elements=["Voodi", "Akvaarium", "Riidekapp"],
        )
        strict = assemble_bundles(answers, bedroom_catalog)[0]
        assert [item.id for item in strict.items] == ["2"]
        assert 'Elementi "Akvaarium" ei õnnestunud tuvastada' in strict.tradeoffs
        assert 'Elemendile "Riidekapp" ei leitud sobivat toodet' in strict.tradeoffs

    def test_role_variants_without_selection(self, bedroom_catalog):
        answers = BundleAnswers(room="Magamistuba", budget_range="2000-4000", style="Modern")
        bundles = assemble_bundles(answers, bedroom_catalog)
        assert [bundle.title for bundle in bundles] == ["Komplekt 1", "Komplekt 2", "Komplekt 3"]
        assert all(bundle.items[0].role_in_bundle == "ankur" for bundle in bundles)

    def test_ai_bundles_mapped_onto_pool(self, bedroom_catalog):
        assist = ScriptedAssist(
            generate_bundles=[
                {
                    "title": "Öine rahu",
                    "items": [
                        {"id": "2", "roleInBundle": "ankur", "whyChosen": "Tugev raam"},
                        {"id": "7", "roleInBundle": "something"},
                        {"id": "999", "roleInBundle": "lisatoode"},
                        {"id": "2", "roleInBundle": "lisatoode"},
                    ],
                }
            ],
            bundle_summary=[{"title": "Rahulik magamistuba", "styleSummary": "Heledad toonid"}],
        )
        answers = BundleAnswers(room="Magamistuba", budget_range="2000-4000", style="Modern")
        bundles = assemble_bundles(answers, bedroom_catalog, assist)

        assert len(bundles) == 1
        assert [item.id for item in bundles[0].items] == ["2", "7"]
        assert bundles[0].items[0].why_chosen == "Tugev raam"
        assert bundles[0].items[1].role_in_bundle == "lisatoode"
        assert bundles[0].title == "Rahulik magamistuba"
        assert bundles[0].style_summary == "Heledad toonid"

    def test_ai_duplicate_of_strict_bundle_dropped(self, bedroom_catalog, bedroom_answers):
        assist = ScriptedAssist(
            generate_bundles=[{"items": [{"id": "5"}, {"id": "3"}, {"id": "2"}]}],
        )
        bundles = assemble_bundles(bedroom_answers, bedroom_catalog, assist)
        assert len(bundles) == 1
        assert bundles[0].title == STRICT_BUNDLE_TITLE

    @pytest.mark.parametrize("malformed", [None, "Hea", {"a": 1}])
    def test_ai_bundle_with_malformed_lists(self, bedroom_catalog, bedroom_answers, malformed):
        assist = ScriptedAssist(
            generate_bundles=[
                {"items": [{"id": "2"}], "keyReasons": malformed, "tradeoffs": malformed},
                {"items": malformed},
                "not a bundle",
            ],
        )
        bundles = assemble_bundles(bedroom_answers, bedroom_catalog, assist)

        assert bundles[0].title == STRICT_BUNDLE_TITLE
        assert len(bundles) == 2
        ai_bundle = bundles[1]
        assert [item.id for item in ai_bundle.items] == ["2"]
        assert ai_bundle.key_reasons == ["Sobib magamistuba", "Eelarve kuni 4000€", "Modern stiil"]
        assert ai_bundle.tradeoffs == []

    def test_malformed_ai_summaries_ignored(self, bedroom_catalog, bedroom_answers):
        assist = ScriptedAssist(bundle_summary=["Rahulik", None])
        bundles = assemble_bundles(bedroom_answers, bedroom_catalog, assist)
        assert bundles[0].title == STRICT_BUNDLE_TITLE

    def test_empty_catalog(self, bedroom_answers):
        assert assemble_bundles(bedroom_answers, []) == []


class TestAlternatives:
    def test_alternatives_exclude_bundle_items(self, bedroom_catalog, bedroom_answers):
        for bundle in assemble_bundles(bedroom_answers, bedroom_catalog):
            in_bundle = {item.id for item in bundle.items}
            for item in bundle.items:
                assert len(item.alternatives) <= 4
                assert not in_bundle.intersection(alt.id for alt in item.alternatives)

    def test_same_element_ranks_first(self, bedroom_catalog, bedroom_answers):
        strict = assemble_bundles(bedroom_answers, bedroom_catalog)[0]
        assert strict.items[0].alternatives[0].id == "10"

    def test_accessory_slot_takes_accessories_only(self, bedroom_catalog, bedroom_answers):
        cards = [product.to_card() for product in bedroom_catalog]
        rug = item_from_card(cards[6], "aksessuaar", element_key="rug")
        strict = assemble_bundles(bedroom_answers, bedroom_catalog)[0]
        strict.items.append(rug)

        alternatives = rank_alternatives(rug, strict, cards, bedroom_answers)
        assert {alt.id for alt in alternatives} == {"6", "8"}
