"""US market rules (FDA / FALCPA)."""

import re
from typing import Any, Dict, List
from compliance.models import MAJOR_US_ALLERGENS, Issue, ValidationRequest
from compliance.text import contains_any_word, normalize_text
from compliance.allergens.contains_statement import get_allergen_variations
from compliance.rules.engine import rule

INGREDIENTS_HEADER = re.compile(r"ingredients?\s*:", re.IGNORECASE)
CONTAINS_HEADER = re.compile(r"contains?\s*:", re.IGNORECASE)

US_SERVING_UNITS = {"g", "kg", "ml", "l", "oz", "fl oz", "cup", "tbsp", "tsp"}
USUAL_SERVING_GRAMS = (1, 1000)

NUTRITION_KEYWORDS = [
    "nutrition facts",
    "nutrition information",
    "nutritional information",
    "calories",
    "total fat",
    "sodium",
    "total carbohydrate",
    "protein",
]


@rule("us.contains_section")
def requires_contains_section(request: ValidationRequest, context: Dict[str, Any]) -> List[Issue]:
    label_text = request.label_text
    if not INGREDIENTS_HEADER.search(label_text):
        return []
    if CONTAINS_HEADER.search(label_text) or request.contains_statement:
        return []

    text = normalize_text(label_text)
    detected = [a for a in MAJOR_US_ALLERGENS if contains_any_word(text, get_allergen_variations(a))]
    if not detected:
        return []

    return [Issue(
        id="US_CONTAINS_SECTION_MISSING",
        severity="low",
        category="format",
        message="Ingredients list found but no explicit 'Contains:' allergen statement.",
        hint="US regulations recommend (and may require) an explicit 'Contains:' section listing major allergens present.",
    )]


@rule("us.serving_size")
def validate_serving_unit(request: ValidationRequest, context: Dict[str, Any]) -> List[Issue]:
    serving_size = request.serving_size
    if serving_size is None or not serving_size.unit:
        return []

    issues = []
    unit = serving_size.unit.strip().lower()
    if unit not in US_SERVING_UNITS:
        issues.append(Issue(
            id="US_INVALID_SERVING_SIZE_UNIT",
            severity="medium",
            category="serving",
            message=f"Serving size unit '{serving_size.unit}' may not be a standard US unit.",
            hint="Use standard US units: g, kg, ml, l, oz, fl oz, cup, tbsp, tsp",
        ))

    low, high = USUAL_SERVING_GRAMS
    value = serving_size.value
    if unit == "g" and value is not None and (value < low or value > high):
        issues.append(Issue(
            id="US_UNUSUAL_SERVING_SIZE",
            severity="low",
            category="serving",
            message=f"Serving size of {value:g}{serving_size.unit} seems unusual.",
            hint="Verify that the serving size is correct and reasonable.",
        ))
    return issues


@rule("us.nutrition_facts")
def requires_nutrition_facts(request: ValidationRequest, context: Dict[str, Any]) -> List[Issue]:
    text = normalize_text(request.label_text)
    if any(keyword in text for keyword in NUTRITION_KEYWORDS):
        return []
    return [Issue(
        id="US_NUTRITION_FACTS_MISSING",
        severity="high",
        category="format",
        message="Nutrition Facts panel not detected in label text.",
        hint="US regulations require a Nutrition Facts panel for most packaged foods.",
    )]


US_RULES = (requires_contains_section, validate_serving_unit, requires_nutrition_facts)
