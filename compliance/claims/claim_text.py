from typing import Optional, Sequence, Set
from compliance.text import contains_word, simplify_text
from compliance.claims.constants import CLAIM_PHRASES


def normalize_claims(claim_texts: Optional[Sequence[str]]) -> Set[str]:
    """Map free-text claims ("High-Protein!", "sugar-free") to canonical claim keys."""
    keys = set()
    for claim in claim_texts or []:
        simplified = simplify_text(claim)
        for phrase, key in CLAIM_PHRASES.items():
            if contains_word(simplified, phrase):
                keys.add(key)
    return keys
