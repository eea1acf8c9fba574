import re
from typing import List, Optional
from compliance.models import MAJOR_US_ALLERGENS
from compliance.text import contains_any_word, normalize_text
from compliance.allergens.constants import (
    ALLERGEN_VARIATIONS,
    CONTAINS_KEYWORDS,
    DECLARES_NONE_TERMS,
)
from compliance.allergens.models import ContainsStatementParse


_CONTAINS_PREFIX = re.compile(r"\b(?:contains?|contient|contiennent)\b\s*:?\s*(.*)", re.IGNORECASE | re.DOTALL)


def get_allergen_variations(allergen: str) -> List[str]:
    """Label variants for a canonical allergen name (the name itself if unknown)."""
    key = allergen.strip().lower()
    base = ALLERGEN_VARIATIONS.get(key, [key])
    variations = list(base)
    if key not in variations:
        variations.append(key)
    return variations


def canonicalize_allergens(text: str) -> List[str]:
    """Map free text ("Peanuts", "wheat flour") to canonical allergen names, in MAJOR_US_ALLERGENS order."""
    found = []
    for allergen in MAJOR_US_ALLERGENS:
        if contains_any_word(text, get_allergen_variations(allergen)):
            found.append(allergen)
    return found


def parse_contains_statement(statement: Optional[str]) -> ContainsStatementParse:
    """
    Parse a "Contains:" statement.

    - Declared allergens are read from the text after "Contains"/"Contient".
      Parenthesised remarks are ignored.
    - "Declares none" is a contains keyword together with none/no/free
      (e.g. "Contains: None", "Contains no allergens (gluten-free)").
    """
    if not statement or not statement.strip():
        return ContainsStatementParse(declared_allergens=[], declares_none=False, raw=None)

    lower = normalize_text(statement)
    declares_none = contains_any_word(lower, CONTAINS_KEYWORDS) and contains_any_word(lower, DECLARES_NONE_TERMS)

    match = _CONTAINS_PREFIX.search(statement)
    body = match.group(1) if match else statement
    body = re.sub(r"\(.*?\)", "", body)

    allergens: List[str] = []
    for candidate in re.split(r"[,;]+|\band\b|\bet\b", body, flags=re.IGNORECASE):
        candidate = candidate.strip()
        if not candidate:
            continue
        for allergen in canonicalize_allergens(candidate):
            if allergen not in allergens:
                allergens.append(allergen)

    return ContainsStatementParse(
        declared_allergens=allergens,
        declares_none=declares_none,
        raw=statement,
    )
