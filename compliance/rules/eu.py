"""EU market rules (Regulation (EU) 1169/2011)."""

import re
from typing import Any, Dict, List, Optional
from compliance.models import Issue, ValidationRequest
from compliance.allergens.constants import EU_MAJOR_ALLERGENS
from compliance.rules.engine import rule

ALLERGENS_LINE = re.compile(r"allergens?\s*:", re.IGNORECASE)
INGREDIENTS_HEADER = re.compile(r"ingr[eé]dients?\s*:", re.IGNORECASE)
PERCENTAGE = re.compile(r"\d+(?:[.,]\d+)?\s?%")

EMPHASIS_MARKERS = "*_"


def _term_pattern(term: str) -> re.Pattern:
    # Underscores count as a boundary so _milk_ still matches
    return re.compile(r"(?<![^\W_])" + re.escape(term) + r"(?![^\W_])", re.IGNORECASE)


def _line_at(text: str, index: int) -> str:
    start = text.rfind("\n", 0, index) + 1
    end = text.find("\n", index)
    return text[start:] if end == -1 else text[start:end]


def is_emphasized(text: str, start: int, end: int) -> bool:
    """Bold/italic markup, ALL CAPS, or on an "Allergens:" line."""
    before = text[start - 1] if start > 0 else ""
    after = text[end] if end < len(text) else ""
    if before and after and before in EMPHASIS_MARKERS and after in EMPHASIS_MARKERS:
        return True
    mention = text[start:end]
    if mention.isupper():
        return True
    return bool(ALLERGENS_LINE.search(_line_at(text, start)))


def find_unemphasized_mention(text: str, terms: List[str]) -> Optional[str]:
    """First term mentioned in text without any emphasized occurrence."""
    for term in terms:
        spans = [(m.start(), m.end()) for m in _term_pattern(term).finditer(text)]
        if not spans:
            continue
        if not any(is_emphasized(text, start, end) for start, end in spans):
            return text[spans[0][0]:spans[0][1]]
    return None


@rule("eu.allergen_emphasis")
def requires_allergen_emphasis(request: ValidationRequest, context: Dict[str, Any]) -> List[Issue]:
    issues = []
    for allergen, terms in EU_MAJOR_ALLERGENS.items():
        mention = find_unemphasized_mention(request.label_text, terms)
        if mention is None:
            continue
        issues.append(Issue(
            id="EU_ALLERGEN_NOT_EMPHASIZED",
            severity="high",
            category="allergen",
            message=f"Allergen '{mention}' is mentioned but not clearly emphasized in the ingredients list.",
            hint="EU regulations require allergens to be emphasized (bold, italic, or in capitals) in the ingredients list.",
            regulation_ref="Regulation (EU) 1169/2011 Art. 21",
        ))
    return issues


@rule("eu.quid")
def requires_quid(request: ValidationRequest, context: Dict[str, Any]) -> List[Issue]:
    label_text = request.label_text
    if INGREDIENTS_HEADER.search(label_text) and PERCENTAGE.search(label_text):
        return []
    return [Issue(
        id="EU_QUID_MISSING",
        severity="low",
        category="format",
        message="QUID (Quantitative Ingredient Declaration) percentages not detected.",
        hint="EU regulations may require QUID percentages for ingredients present at >2% or >5% of the finished product.",
        regulation_ref="Regulation (EU) 1169/2011 Art. 22",
    )]


EU_RULES = (requires_allergen_emphasis, requires_quid)
