"""
Reference food selection.

Scores every candidate returned by the food search and keeps the best one:

    score = name similarity      × 0.6   (only with a product name)
          + serving proximity    × 0.25  (1 within ±20 %, else 1 - diff)
          + macro completeness   × 0.15  (protein / fat / carbs present ÷ 3)
          + high-protein bonus   × 0.2   (min(1, protein / 20), only with that claim)

Ties keep the earlier candidate.
"""

from typing import List, Optional, Sequence
from rapidfuzz import fuzz
from compliance.models import FoodSummary, MacroSnapshot, ServingSize
from compliance.text import simplify_text
from compliance.claims.claim_text import normalize_claims
from compliance.claims.constants import (
    MACRO_COMPLETENESS_WEIGHT,
    MACRO_FALLBACKS,
    MATCHER_SERVING_UNITS,
    NAME_WEIGHT,
    PROTEIN_BONUS_REFERENCE_G,
    PROTEIN_CLAIM_WEIGHT,
    SERVING_TOLERANCE,
    SERVING_WEIGHT,
)
from compliance.claims.models import FoodSelection
from compliance.claims.units import serving_size_in_grams


def name_similarity(a: str, b: str) -> float:
    """Similarity of two names in [0, 1] after lowercasing and stripping punctuation."""
    left, right = simplify_text(a), simplify_text(b)
    if not left or not right:
        return 0.0
    return fuzz.ratio(left, right) / 100.0


def serving_proximity(serving_size: Optional[ServingSize], food: FoodSummary) -> Optional[float]:
    if serving_size is None or not food.serving_size:
        return None
    unit = (serving_size.unit or "g").strip().lower()
    if unit not in MATCHER_SERVING_UNITS:
        return None
    requested = serving_size_in_grams(serving_size.value, unit)
    if not requested:
        return None
    diff = abs(food.serving_size - requested) / requested
    if diff <= SERVING_TOLERANCE:
        return 1.0
    return max(0.0, 1.0 - diff)


def _has_high_protein_claim(claim_texts: Optional[Sequence[str]]) -> bool:
    return "high_protein" in normalize_claims(claim_texts)


def score_food(
    food: FoodSummary,
    product_name: Optional[str] = None,
    serving_size: Optional[ServingSize] = None,
    claim_texts: Optional[Sequence[str]] = None,
) -> float:
    score = 0.0

    if product_name:
        score += name_similarity(product_name, food.description) * NAME_WEIGHT

    proximity = serving_proximity(serving_size, food)
    if proximity is not None:
        score += proximity * SERVING_WEIGHT

    macros = food.macros
    present = sum(1 for value in (macros.protein_g, macros.fat_g, macros.carbs_g) if value is not None)
    score += (present / 3) * MACRO_COMPLETENESS_WEIGHT

    if _has_high_protein_claim(claim_texts):
        score += min(1.0, (macros.protein_g or 0) / PROTEIN_BONUS_REFERENCE_G) * PROTEIN_CLAIM_WEIGHT

    return score


def lookup_fallback_macros(name: str) -> Optional[MacroSnapshot]:
    """Built-in average macros for a product name, longest matching key first."""
    lowered = (name or "").lower()
    for key in sorted(MACRO_FALLBACKS, key=len, reverse=True):
        if key in lowered:
            return MACRO_FALLBACKS[key]
    return None


def choose_best_food(
    foods: List[FoodSummary],
    product_name: Optional[str] = None,
    serving_size: Optional[ServingSize] = None,
    claim_texts: Optional[Sequence[str]] = None,
) -> FoodSelection:
    """
    Pick the highest scoring candidate.

    When the winner has no protein, fat or carbs, a warning is added and the
    fallback macro table is consulted. Fallback macros are never used
    without that warning.
    """
    if not foods:
        return FoodSelection(warnings=["No foods returned from FDC search."])

    best_food = None
    best_score = float("-inf")
    for food in foods:
        score = score_food(food, product_name, serving_size, claim_texts)
        if score > best_score:
            best_score = score
            best_food = food

    warnings: List[str] = []
    fallback_macros = None

    macros = best_food.macros
    if all(not value or value <= 0 for value in (macros.protein_g, macros.fat_g, macros.carbs_g)):
        warnings.append(
            f"Chosen food {best_food.description} lacks macro data. Falling back to averages if available."
        )
        fallback_macros = lookup_fallback_macros(product_name or foods[0].description)

    return FoodSelection(
        food=best_food,
        score=best_score,
        warnings=warnings,
        fallback_macros=fallback_macros,
    )
