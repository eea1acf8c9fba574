"""FR-specific rules, run after the EU rules."""

import re
from typing import Any, Dict, List
from compliance.models import Issue, ValidationRequest
from compliance.text import contains_any_word, normalize_text
from compliance.rules.engine import rule

FRENCH_KEYWORDS = [
    "ingrédients",
    "ingrédient",
    "contenant",
    "contient",
    "allergènes",
    "valeurs nutritionnelles",
    "pour 100g",
    "matière grasse",
    "matières grasses",
    "glucides",
    "protéines",
    "sel",
]

NUTRI_SCORE = re.compile(r"nutri[\s\-_]?score", re.IGNORECASE)


@rule("fr.french_language")
def requires_french_language(request: ValidationRequest, context: Dict[str, Any]) -> List[Issue]:
    if contains_any_word(normalize_text(request.label_text), FRENCH_KEYWORDS):
        return []
    return [Issue(
        id="FR_FRENCH_LANGUAGE_REQUIRED",
        severity="medium",
        category="format",
        message="Label does not appear to contain French text.",
        hint="French regulations require labels to be in French. Include French translations for all mandatory information.",
        regulation_ref="Code de la consommation L.112-8",
    )]


@rule("fr.nutri_score")
def recommends_nutri_score(request: ValidationRequest, context: Dict[str, Any]) -> List[Issue]:
    if NUTRI_SCORE.search(request.label_text):
        return []
    return [Issue(
        id="FR_NUTRISCORE_RECOMMENDED",
        severity="low",
        category="format",
        message="Nutri-Score not detected (voluntary but recommended).",
        hint="While not mandatory, the Nutri-Score is strongly recommended in France to help consumers make healthier choices.",
    )]


FR_RULES = (requires_french_language, recommends_nutri_score)
