"""
Text normalization helpers shared by the detectors and market rules.

This is the narrow "tokenize + normalize" capability: every matcher in the
engine goes through these functions, so swapping in a smarter tokenizer only
touches this module.
"""

import re
from typing import Iterable, Iterator, List, Tuple

# Words that turn a nearby allergen mention into a "free from" statement
NEGATION_TERMS = ("no", "without", "free", "sans", "zero", "zéro", "none", "aucun")

# Characters scanned on each side of a match for a negation term
NEGATION_WINDOW = 40


def normalize_text(text: str) -> str:
    """
    Normalize text for matching.
    - Lowercase
    - Collapse whitespace
    Accents and punctuation are kept so patterns like "farine de blé"
    or "gluten-free" still match.
    """
    if not text:
        return ""
    text = text.lower()
    text = re.sub(r'\s+', ' ', text).strip()
    return text


def simplify_text(text: str) -> str:
    """Lowercase, replace punctuation (including hyphens) with spaces, collapse whitespace."""
    if not text:
        return ""
    text = text.lower()
    text = re.sub(r'[^\w\s]', ' ', text)
    text = re.sub(r'\s+', ' ', text).strip()
    return text


def tokenize(text: str) -> List[str]:
    """Split simplified text into word tokens."""
    return simplify_text(text).split()


def _word_pattern(term: str) -> re.Pattern:
    # Lookarounds instead of \b so multi-word and accented terms behave
    return re.compile(r'(?<!\w)' + re.escape(term.lower()) + r'(?!\w)', re.IGNORECASE)


def contains_word(text: str, term: str) -> bool:
    """Case-insensitive whole-word (or whole-phrase) search."""
    if not text or not term:
        return False
    return _word_pattern(term).search(text) is not None


def contains_any_word(text: str, terms: Iterable[str]) -> bool:
    return any(contains_word(text, term) for term in terms)


def find_word_spans(text: str, term: str) -> Iterator[Tuple[int, int]]:
    """Yield (start, end) of every whole-word occurrence of term in text."""
    if not text or not term:
        return
    for match in _word_pattern(term).finditer(text):
        yield match.start(), match.end()


def negation_window(text: str, start: int, end: int, radius: int = NEGATION_WINDOW) -> str:
    """Return the slice of text within radius characters of a match."""
    return text[max(0, start - radius):end + radius]


def is_negated_nearby(text: str, start: int, end: int, radius: int = NEGATION_WINDOW) -> bool:
    """True if any negation term appears as a whole word near the match."""
    window = negation_window(text, start, end, radius).lower()
    return contains_any_word(window, NEGATION_TERMS)
