"""
Basic label validator.

The single-pass check that predates the allergen detector and
the market rules: whole-word allergen scan, serving-size presence, claim
plausibility against the first context food, and the "Contains:" format
check. Messages are rendered in the caller's locale; ids, categories and
severities are the same in every locale.
"""

from typing import List, Optional
from compliance.models import (
    CLAIM_THRESHOLDS,
    MAJOR_US_ALLERGENS,
    FoodSummary,
    Issue,
    ReportContext,
    ReportSummary,
    ServingSize,
    ValidationReport,
)
from compliance.text import contains_any_word, normalize_text
from compliance.allergens.contains_statement import get_allergen_variations
from compliance.claims.claim_text import normalize_claims
from compliance.i18n.messages import DEFAULT_LOCALE, get_message

COMMON_SERVING_UNITS = ["g", "gram", "grams", "ml", "milliliter", "milliliters", "oz", "ounce", "fl oz"]


def _is_declared(allergen: str, declared: List[str]) -> bool:
    return any(d and (d in allergen or allergen in d) for d in declared)


def validate_label_basic(
    label_text: str,
    declared_allergens: Optional[List[str]] = None,
    serving_size: Optional[ServingSize] = None,
    claim_texts: Optional[List[str]] = None,
    context_foods: Optional[List[FoodSummary]] = None,
    locale: str = DEFAULT_LOCALE,
) -> ValidationReport:
    issues: List[Issue] = []
    text = normalize_text(label_text)
    declared = [a.strip().lower() for a in (declared_allergens or [])]

    allergens_found = []
    for allergen in MAJOR_US_ALLERGENS:
        if not contains_any_word(text, get_allergen_variations(allergen)):
            continue
        allergens_found.append(allergen)
        if not _is_declared(allergen, declared):
            issues.append(Issue(
                id="ALLERGEN_MISSING",
                category="allergen",
                severity="high",
                message=get_message(locale, "ALLERGEN_MISSING", allergen),
                hint=get_message(locale, "ALLERGEN_MISSING_HINT"),
                regulation_ref="US 21 CFR 101.4; FALCPA",
            ))

    if serving_size is None:
        issues.append(Issue(
            id="SERVING_SIZE_MISSING",
            category="serving",
            severity="medium",
            message=get_message(locale, "SERVING_SIZE_MISSING"),
            hint=get_message(locale, "SERVING_SIZE_MISSING_HINT"),
            regulation_ref="US 21 CFR 101.9",
        ))
    else:
        unit = (serving_size.unit or "").strip().lower()
        if not any(common in unit for common in COMMON_SERVING_UNITS):
            issues.append(Issue(
                id="SERVING_SIZE_UNIT_UNCOMMON",
                category="serving",
                severity="low",
                message=get_message(locale, "SERVING_SIZE_UNIT_UNCOMMON", serving_size.unit or ""),
                hint=get_message(locale, "SERVING_SIZE_UNIT_UNCOMMON_HINT"),
            ))

    # Claims are only checked against a reference food
    claims = normalize_claims(claim_texts)
    reference = context_foods[0] if context_foods else None
    if reference is not None:
        macros = reference.macros
        protein = macros.protein_g or 0
        fat = macros.fat_g or 0
        carbs = macros.carbs_g or 0
        if "high_protein" in claims and protein < CLAIM_THRESHOLDS["HIGH_PROTEIN_MIN_G"]:
            issues.append(Issue(
                id="CLAIM_HIGH_PROTEIN_UNSUPPORTED",
                category="claims",
                severity="medium",
                message=get_message(locale, "CLAIM_HIGH_PROTEIN_UNSUPPORTED", f"{protein:g}"),
                hint=get_message(locale, "CLAIM_HIGH_PROTEIN_UNSUPPORTED_HINT"),
            ))
        if "low_fat" in claims and fat >= CLAIM_THRESHOLDS["LOW_FAT_MAX_G"]:
            issues.append(Issue(
                id="CLAIM_LOW_FAT_UNSUPPORTED",
                category="claims",
                severity="medium",
                message=get_message(locale, "CLAIM_LOW_FAT_UNSUPPORTED", f"{fat:g}"),
                hint=get_message(locale, "CLAIM_LOW_FAT_UNSUPPORTED_HINT"),
            ))
        if "sugar_free" in claims and carbs > CLAIM_THRESHOLDS["SUGAR_FREE_MAX_G"]:
            issues.append(Issue(
                id="CLAIM_SUGAR_FREE_UNSUPPORTED",
                category="claims",
                severity="medium",
                message=get_message(locale, "CLAIM_SUGAR_FREE_UNSUPPORTED", f"{carbs:g}"),
                hint=get_message(locale, "CLAIM_SUGAR_FREE_UNSUPPORTED_HINT"),
            ))

    has_ingredients = "ingredient" in text
    has_contains = "contains" in text or "contient" in text
    if has_ingredients and not has_contains and allergens_found:
        issues.append(Issue(
            id="CONTAINS_SECTION_MISSING",
            category="format",
            severity="low",
            message=get_message(locale, "CONTAINS_SECTION_MISSING"),
            hint=get_message(locale, "CONTAINS_SECTION_MISSING_HINT"),
        ))

    context = None
    if context_foods:
        context = ReportContext(foods=context_foods, chosen=context_foods[0])

    return ValidationReport(
        valid=not issues,
        issues=issues,
        summary=ReportSummary(
            allergens_found=allergens_found or None,
            total_issues=len(issues),
        ),
        context=context,
    )
