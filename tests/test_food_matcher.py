"""Tests for reference food selection."""

import pytest

from compliance.claims.food_matcher import (
    choose_best_food,
    lookup_fallback_macros,
    name_similarity,
    score_food,
    serving_proximity,
)
from compliance.models import ServingSize


class TestNameSimilarity:

    def test_identical_names(self):
        assert name_similarity("Greek Yogurt", "greek yogurt!") == pytest.approx(1.0)

    def test_unrelated_names_score_low(self):
        assert name_similarity("greek yogurt", "tomato soup") < 0.5

    def test_empty_name(self):
        assert name_similarity("", "anything") == 0.0


class TestServingProximity:

    def test_within_tolerance(self, make_food):
        food = make_food(serving_size=170)
        assert serving_proximity(ServingSize(value=160, unit="g"), food) == 1.0

    def test_ounces_are_converted(self, make_food):
        food = make_food(serving_size=28)
        assert serving_proximity(ServingSize(value=1, unit="oz"), food) == 1.0

    def test_far_serving(self, make_food):
        food = make_food(serving_size=300)
        assert serving_proximity(ServingSize(value=100, unit="g"), food) == 0.0

    def test_unsupported_unit(self, make_food):
        food = make_food(serving_size=100)
        assert serving_proximity(ServingSize(value=1, unit="cup"), food) is None


class TestChooseBestFood:

    def test_empty_candidates(self):
        selection = choose_best_food([])
        assert selection.food is None
        assert selection.warnings == ["No foods returned from FDC search."]

    def test_prefers_name_match(self, make_food):
        foods = [
            make_food(1, "Strawberry jam", protein=0.4, fat=0.1, carbs=60),
            make_food(2, "Greek yogurt, plain, nonfat", protein=10, fat=0.4, carbs=3.6),
        ]
        selection = choose_best_food(foods, product_name="Greek Yogurt Plain")
        assert selection.food.fdc_id == 2
        assert selection.warnings == []
        assert selection.fallback_macros is None

    def test_high_protein_claim_bonus(self, make_food):
        foods = [
            make_food(1, "Yogurt A", protein=3, fat=1, carbs=5),
            make_food(2, "Yogurt B", protein=18, fat=1, carbs=5),
        ]
        selection = choose_best_food(foods, product_name="Yogurt", claim_texts=["High Protein"])
        assert selection.food.fdc_id == 2

    def test_high_in_protein_wording_gets_bonus(self, make_food):
        foods = [
            make_food(1, "Yogurt A", protein=3, fat=1, carbs=5),
            make_food(2, "Yogurt B", protein=18, fat=1, carbs=5),
        ]
        selection = choose_best_food(foods, product_name="Yogurt", claim_texts=["High in protein"])
        assert selection.food.fdc_id == 2

    def test_no_bonus_without_protein_claim(self, make_food):
        foods = [
            make_food(1, "Yogurt A", protein=3, fat=1, carbs=5),
            make_food(2, "Yogurt B", protein=18, fat=1, carbs=5),
        ]
        selection = choose_best_food(foods, product_name="Yogurt", claim_texts=["Low in fat"])
        assert selection.food.fdc_id == 1

    def test_ties_keep_first_candidate(self, make_food):
        foods = [
            make_food(1, "Plain yogurt", protein=5, fat=2, carbs=7),
            make_food(2, "Plain yogurt", protein=5, fat=2, carbs=7),
        ]
        assert choose_best_food(foods, product_name="Plain yogurt").food.fdc_id == 1

    def test_missing_macros_use_fallback(self, make_food):
        foods = [make_food(1, "Greek yogurt, strained", protein=0, fat=0, carbs=0)]
        selection = choose_best_food(foods, product_name="Greek yogurt", claim_texts=["high protein"])
        assert selection.food.fdc_id == 1
        assert "lacks macro data" in selection.warnings[0]
        assert selection.fallback_macros.protein_g == 12

    def test_missing_macros_without_fallback_entry(self, make_food):
        foods = [make_food(1, "Mystery snack")]
        selection = choose_best_food(foods, product_name="Mystery snack")
        assert selection.warnings
        assert selection.fallback_macros is None

    def test_score_counts_macro_completeness(self, make_food):
        complete = make_food(1, "x", protein=1, fat=1, carbs=1)
        empty = make_food(2, "x")
        assert score_food(complete) == pytest.approx(0.15)
        assert score_food(empty) == 0.0


class TestFallbackTable:

    def test_longest_key_wins(self):
        assert lookup_fallback_macros("Organic Greek Yogurt").protein_g == 12
        assert lookup_fallback_macros("Vanilla yogurt").protein_g == 9

    def test_unknown_product(self):
        assert lookup_fallback_macros("granola") is None
