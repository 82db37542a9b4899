"""Tests for budget resolution and the bundle preference scorer."""

from conftest import make_card

from sisustus.models.bundle import BundleAnswers
from sisustus.services.scorer import resolve_budget, score_product


class TestResolveBudget:
    def test_custom_budget(self):
        assert resolve_budget(BundleAnswers(budget_range="custom", budget_custom=5000)) == 5000

    def test_bucket_upper_bound(self):
        assert resolve_budget(BundleAnswers(budget_range="4000-7000")) == 7000

    def test_unknown_bucket_falls_back_to_smallest(self):
        assert resolve_budget(BundleAnswers(budget_range="whatever")) == 4000

    def test_custom_without_value(self):
        assert resolve_budget(BundleAnswers(budget_range="custom")) == 4000


class TestScoreProduct:
    def test_style_counts_once(self):
        answers = BundleAnswers(style="Modern", budget_range="2000-4000")
        card = make_card("1", "Modern minimalist diivan", 500)
        # style +3, within budget +1
        assert score_product(card, answers) == 4

    def test_colour_tone(self):
        answers = BundleAnswers(color_tone="Hele", budget_range="2000-4000")
        assert score_product(make_card("1", "Valge kummut", 300), answers) == 3

    def test_price_over_tolerance_penalised(self):
        answers = BundleAnswers(budget_range="2000-4000")
        assert score_product(make_card("1", "Diivan", 4700), answers) == -2

    def test_price_between_ceiling_and_tolerance_is_neutral(self):
        answers = BundleAnswers(budget_range="2000-4000")
        assert score_product(make_card("1", "Diivan", 4500), answers) == 0

    def test_material_bonus_and_conflict_both_apply(self):
        # A fabric sofa for a fabric lover with pets and kids: +2 bonus, -3 per flag.
        answers = BundleAnswers(
            budget_range="2000-4000",
            material_preference="Kangas",
            has_pets=True,
            has_children=True,
        )
        card = make_card("1", "Diivan kangas", 900)
        assert score_product(card, answers) == 2 - 3 - 3 + 1

    def test_conflicts_ignored_without_material_preference(self):
        answers = BundleAnswers(budget_range="2000-4000", has_pets=True)
        assert score_product(make_card("1", "Diivan kangas", 900), answers) == 1

    def test_easy_clean_material_with_pets(self):
        answers = BundleAnswers(budget_range="2000-4000", has_pets=True, material_preference="Pole vahet")
        assert score_product(make_card("1", "Tugitool kunstnahk", 400), answers) == 3
