import asyncio
import logging
from typing import List, Optional, Sequence
from compliance.models import (
    CLAIM_THRESHOLDS,
    FoodSummary,
    Issue,
    MacroSnapshot,
    NutritionProfile,
    ServingSize,
    ValidationRequest,
)
from compliance.food_search.models import FoodSearch, FoodSearchError, LookupCancelled
from compliance.claims.claim_text import normalize_claims
from compliance.claims.constants import FDC_LOOKUP_FAILED_HINT
from compliance.claims.food_matcher import choose_best_food
from compliance.claims.models import ClaimEvaluationResult
from compliance.claims.units import merge_snapshots, snapshot_from_nutrition

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 10


def validate_claims(claim_texts: Optional[Sequence[str]], macros: MacroSnapshot) -> List[Issue]:
    """Check marketing claims against per-serving macros (grams)."""
    issues: List[Issue] = []
    claims = normalize_claims(claim_texts)
    if not claims:
        return issues

    if "high_protein" in claims:
        protein = macros.protein_g
        if protein is None:
            issues.append(Issue(
                id="CLAIM_HIGH_PROTEIN_DATA_MISSING",
                category="claims",
                severity="medium",
                message="Claim 'high protein' cannot be validated: protein data missing.",
                hint="Provide protein grams per serving.",
                regulation_ref="21 CFR 101.54",
            ))
        elif protein < CLAIM_THRESHOLDS["HIGH_PROTEIN_MIN_G"]:
            issues.append(Issue(
                id="CLAIM_HIGH_PROTEIN_UNSUPPORTED",
                category="claims",
                severity="medium",
                message=f"Claim 'high protein' unsupported: {protein:g}g < 10g required.",
                hint="Ensure ≥10g protein per serving per 21 CFR 101.54.",
                regulation_ref="21 CFR 101.54",
            ))

    if "low_fat" in claims:
        fat = macros.fat_g
        if fat is None:
            issues.append(Issue(
                id="CLAIM_LOW_FAT_DATA_MISSING",
                category="claims",
                severity="medium",
                message="Claim 'low fat' cannot be validated: fat data missing.",
                hint="Provide fat grams per serving.",
                regulation_ref="21 CFR 101.62(b)(2)",
            ))
        elif fat >= CLAIM_THRESHOLDS["LOW_FAT_MAX_G"]:
            issues.append(Issue(
                id="CLAIM_LOW_FAT_UNSUPPORTED",
                category="claims",
                severity="medium",
                message=f"Claim 'low fat' unsupported: {fat:g}g ≥ 3g threshold.",
                hint="Reduce fat content to <3g per serving for 'low fat' claim.",
                regulation_ref="21 CFR 101.62(b)(2)",
            ))

    if "sugar_free" in claims:
        carbs = macros.carbs_g
        if carbs is None:
            issues.append(Issue(
                id="CLAIM_SUGAR_FREE_DATA_MISSING",
                category="claims",
                severity="medium",
                message="Claim 'sugar free' cannot be validated: carbohydrate data missing.",
                hint="Provide carbohydrate (or sugar) grams per serving.",
                regulation_ref="21 CFR 101.60(c)",
            ))
        elif carbs > CLAIM_THRESHOLDS["SUGAR_FREE_MAX_G"]:
            issues.append(Issue(
                id="CLAIM_SUGAR_FREE_UNSUPPORTED",
                category="claims",
                severity="medium",
                message=f"Claim 'sugar free' unsupported: {carbs:g}g > 0.5g threshold.",
                hint="Ensure less than 0.5g sugars per serving to support 'sugar free' claims, or revise the claim.",
                regulation_ref="21 CFR 101.60(c)",
            ))

    return issues


def _describe_failure(error: Exception) -> str:
    if isinstance(error, FoodSearchError):
        return error.message
    return str(error) or "Unknown error occurred while contacting FDC API."


def _has_any_macro(snapshot: MacroSnapshot) -> bool:
    return any(value is not None for value in snapshot.model_dump().values())


class ClaimsEvaluator:
    """
    Checks claims, optionally against a reference food from the food search.

    Macro priority, per field: explicit snapshot > declared nutrition >
    chosen food > fallback table. A failed, empty or cancelled lookup adds
    FDC_LOOKUP_FAILED and evaluation continues with the declared data.
    """

    def __init__(self, food_search: Optional[FoodSearch] = None, search_limit: int = DEFAULT_SEARCH_LIMIT):
        self.food_search = food_search
        self.search_limit = search_limit

    async def _search(self, query: str, cancel_event: Optional[asyncio.Event]) -> List[FoodSummary]:
        if self.food_search is None:
            raise FoodSearchError("NOT_CONFIGURED", "No food search client is configured.")
        if cancel_event is not None and cancel_event.is_set():
            raise LookupCancelled()

        search_task = asyncio.ensure_future(self.food_search.search(query, self.search_limit, cancel_event))
        if cancel_event is None:
            result = await search_task
            return result.items

        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait({search_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancel_task.cancel()
            if not search_task.done():
                search_task.cancel()

        if search_task in done:
            return search_task.result().items
        raise LookupCancelled()

    async def evaluate(
        self,
        claim_texts: Optional[Sequence[str]] = None,
        nutrition: Optional[NutritionProfile] = None,
        macros: Optional[MacroSnapshot] = None,
        reference_food_query: Optional[str] = None,
        product_name: Optional[str] = None,
        serving_size: Optional[ServingSize] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ClaimEvaluationResult:
        declared = merge_snapshots(macros, snapshot_from_nutrition(nutrition))

        if not reference_food_query:
            return ClaimEvaluationResult(
                issues=validate_claims(claim_texts, declared),
                macros=declared,
                source="input" if _has_any_macro(declared) else "none",
            )

        try:
            foods = await self._search(reference_food_query, cancel_event)
            if not foods:
                raise FoodSearchError("NO_RESULTS", "No foods returned from FDC search.")
        except Exception as e:
            # Collaborator failures never abort validation
            logger.warning("Reference food lookup for '%s' failed: %s", reference_food_query, e)
            lookup_failed = Issue(
                id="FDC_LOOKUP_FAILED",
                category="claims",
                severity="low",
                message="Unable to validate claims against USDA FoodData Central.",
                hint=FDC_LOOKUP_FAILED_HINT,
            )
            return ClaimEvaluationResult(
                issues=[lookup_failed] + validate_claims(claim_texts, declared),
                macros=declared,
                source="input" if _has_any_macro(declared) else "fallback",
                warnings=[_describe_failure(e)],
            )

        selection = choose_best_food(
            foods,
            product_name=product_name or reference_food_query,
            serving_size=serving_size,
            claim_texts=claim_texts,
        )
        chosen = selection.food
        food_macros = merge_snapshots(chosen.macros, MacroSnapshot(calories_kcal=chosen.calories_kcal))
        if selection.fallback_macros is not None:
            # Chosen food has no usable protein/fat/carbs; keep only its energy
            food_macros = MacroSnapshot(calories_kcal=food_macros.calories_kcal)

        resolved = merge_snapshots(declared, food_macros, selection.fallback_macros)
        source = "fallback" if selection.fallback_macros is not None else "fdc"

        return ClaimEvaluationResult(
            issues=validate_claims(claim_texts, resolved),
            foods=foods,
            chosen_food=chosen,
            macros=resolved,
            source=source,
            warnings=selection.warnings,
        )

    async def evaluate_request(
        self,
        request: ValidationRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ClaimEvaluationResult:
        return await self.evaluate(
            claim_texts=request.claim_texts,
            nutrition=request.nutrition,
            reference_food_query=request.reference_food_query,
            product_name=request.product_name,
            serving_size=request.serving_size,
            cancel_event=cancel_event,
        )
