import math
from typing import List, Optional
from compliance.models import Issue, ServingSize

SERVING_SIZE_REGULATION_REF = "US 21 CFR 101.9"

VALID_SERVING_UNITS = {
    "g",
    "gram",
    "grams",
    "kg",
    "ml",
    "milliliter",
    "milliliters",
    "l",
    "oz",
    "ounce",
    "ounces",
    "fl oz",
    "cup",
    "cups",
    "tbsp",
    "tsp",
    "slice",
}


def validate_serving_size(serving_size: Optional[ServingSize]) -> List[Issue]:
    """Check that a serving size is present, positive and uses a common unit."""
    if serving_size is None:
        return [Issue(
            id="SERVING_SIZE_MISSING",
            category="serving",
            severity="medium",
            message="Serving size is required for nutrition labeling.",
            hint="Provide serving size with value and unit per 21 CFR 101.9.",
            regulation_ref=SERVING_SIZE_REGULATION_REF,
        )]

    issues: List[Issue] = []
    value = serving_size.value
    unit = (serving_size.unit or "").strip().lower()

    if value is None or math.isnan(value) or value <= 0:
        issues.append(Issue(
            id="SERVING_SIZE_INVALID",
            category="nutrition",
            severity="medium",
            message="Serving size must be positive and have a valid unit.",
            hint="Use positive number and units like 'g' or 'ml'.",
            regulation_ref=SERVING_SIZE_REGULATION_REF,
        ))

    if not unit:
        issues.append(Issue(
            id="SERVING_SIZE_UNIT_MISSING",
            category="serving",
            severity="medium",
            message="Serving size unit is required.",
            hint="Common units include 'g', 'ml', 'cup'.",
            regulation_ref=SERVING_SIZE_REGULATION_REF,
        ))
    elif unit not in VALID_SERVING_UNITS:
        issues.append(Issue(
            id="SERVING_SIZE_UNIT_INVALID",
            category="serving",
            severity="low",
            message=f"Serving size unit '{serving_size.unit}' is not recognized.",
            hint="Use SI units such as g, ml, or customary units like cup.",
        ))

    return issues
