"""
Validation Orchestrator

Runs every check for one label and merges the findings into a single report:

1. Allergen detection
2. Serving size
3. Claims (with the optional reference-food lookup)
4. Market rules
5. Market claim thresholds

Issues are deduplicated by id (first one wins). A check that fails
unexpectedly is reported as SYSTEM_CHECK_FAILED instead of aborting the run.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Callable, List, Optional
from compliance.config import get_settings
from compliance.models import (
    Issue,
    ReportContext,
    ReportSummary,
    ValidationReport,
    ValidationRequest,
    dedupe_issues,
)
from compliance.allergens.detector import detect_allergens_for_request
from compliance.allergens.models import AllergenDetectionResult
from compliance.serving_size.validator import validate_serving_size
from compliance.claims.evaluator import ClaimsEvaluator
from compliance.claims.market_thresholds import apply_market_thresholds
from compliance.claims.models import ClaimEvaluationResult
from compliance.food_search.client import UsdaFoodSearch
from compliance.food_search.models import FoodSearch
from compliance.rules.engine import RuleEngine
from compliance.rules.registry import build_default_rule_engine

logger = logging.getLogger(__name__)


def _system_issue(stage: str) -> Issue:
    return Issue(
        id="SYSTEM_CHECK_FAILED",
        severity="low",
        category="system",
        message=f"The {stage} check could not be completed.",
        hint="Results for this check are incomplete. Retry the validation or review the input.",
    )


@lru_cache(maxsize=1)
def get_default_rule_engine() -> RuleEngine:
    return build_default_rule_engine()


@lru_cache(maxsize=1)
def get_default_food_search() -> Optional[UsdaFoodSearch]:
    """Shared USDA client, or None when USDA_API_KEY is not configured."""
    return UsdaFoodSearch.from_settings()


class ValidationOrchestrator:
    def __init__(
        self,
        rule_engine: Optional[RuleEngine] = None,
        food_search: Optional[FoodSearch] = None,
        search_limit: Optional[int] = None,
    ):
        self.rule_engine = rule_engine or get_default_rule_engine()
        self.claims_evaluator = ClaimsEvaluator(
            food_search=food_search,
            search_limit=search_limit or get_settings().food_search_limit,
        )

    def _run_stage(self, stage: str, fn: Callable[[], List[Issue]]) -> List[Issue]:
        try:
            return fn()
        except Exception:
            logger.exception("%s check failed", stage)
            return [_system_issue(stage)]

    async def validate(
        self,
        request: ValidationRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ValidationReport:
        issues: List[Issue] = []

        detection = AllergenDetectionResult()
        try:
            detection = detect_allergens_for_request(request)
            issues.extend(detection.issues)
        except Exception:
            logger.exception("allergen check failed")
            issues.append(_system_issue("allergen"))

        issues.extend(self._run_stage("serving size", lambda: validate_serving_size(request.serving_size)))

        claims = ClaimEvaluationResult()
        try:
            claims = await self.claims_evaluator.evaluate_request(request, cancel_event=cancel_event)
            issues.extend(claims.issues)
        except Exception:
            logger.exception("claims check failed")
            issues.append(_system_issue("claims"))

        issues.extend(self._run_stage("market rules", lambda: self.rule_engine.execute(request, request.markets)))
        issues.extend(self._run_stage(
            "market thresholds",
            lambda: apply_market_thresholds(request.markets, request.claim_texts, claims.macros),
        ))

        issues = dedupe_issues(issues)

        context = None
        if claims.foods or claims.warnings:
            context = ReportContext(
                foods=claims.foods,
                chosen=claims.chosen_food,
                warnings=claims.warnings or None,
            )

        report = ValidationReport(
            valid=not issues,
            issues=issues,
            summary=ReportSummary(
                allergens_found=detection.detected_allergens or None,
                total_issues=len(issues),
            ),
            context=context,
        )
        logger.info(
            "Validated label for markets %s: allergens=%s issues=%d",
            ",".join(request.markets or ["US"]),
            detection.detected_allergens,
            len(issues),
        )
        return report

    def validate_sync(self, request: ValidationRequest) -> ValidationReport:
        """Synchronous wrapper for scripts and tests."""
        return asyncio.run(self.validate(request))


async def validate_label(
    request: ValidationRequest,
    *,
    rule_engine: Optional[RuleEngine] = None,
    food_search: Optional[FoodSearch] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> ValidationReport:
    """
    Validate one label.

    Without an explicit ``food_search``, the shared USDA client is used when
    USDA_API_KEY is configured.
    """
    if food_search is None:
        food_search = get_default_food_search()
    orchestrator = ValidationOrchestrator(rule_engine=rule_engine, food_search=food_search)
    return await orchestrator.validate(request, cancel_event=cancel_event)


def validate_label_sync(
    request: ValidationRequest,
    *,
    rule_engine: Optional[RuleEngine] = None,
    food_search: Optional[FoodSearch] = None,
) -> ValidationReport:
    return asyncio.run(validate_label(request, rule_engine=rule_engine, food_search=food_search))


def execute_rules(
    request: ValidationRequest,
    markets: Optional[List[str]] = None,
    rule_engine: Optional[RuleEngine] = None,
) -> List[Issue]:
    """Market rules only, without the allergen, serving or claim checks."""
    engine = rule_engine or get_default_rule_engine()
    return engine.execute(request, markets or request.markets)
