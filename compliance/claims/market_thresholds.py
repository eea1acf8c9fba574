"""
Market-specific numeric thresholds for nutrient content claims.

US follows 21 CFR (grams per serving); EU follows Regulation (EC) 1924/2006
(share of energy from protein). FR applies the EU thresholds.
"""

import logging
from typing import Callable, Dict, List, Optional, Set
from compliance.models import Issue, MacroSnapshot
from compliance.claims.claim_text import normalize_claims

logger = logging.getLogger(__name__)

KCAL_PER_GRAM_PROTEIN = 4
EU_PROTEIN_ENERGY_MIN_PCT = 20.0
EU_REGULATION_REF = "Regulation (EC) 1924/2006"

ThresholdCheck = Callable[[Set[str], MacroSnapshot], Optional[Issue]]


def us_high_protein(claims: Set[str], macros: MacroSnapshot) -> Optional[Issue]:
    if "high_protein" not in claims or macros.protein_g is None:
        return None
    if macros.protein_g >= 10:
        return None
    return Issue(
        id="US_HIGH_PROTEIN_THRESHOLD",
        category="claims",
        severity="medium",
        message=f"US market: 'high protein' requires ≥10g protein. Found {macros.protein_g:.1f}g.",
        hint="Adjust formulation or claim wording for the US market.",
        regulation_ref="21 CFR 101.54",
    )


def us_low_fat(claims: Set[str], macros: MacroSnapshot) -> Optional[Issue]:
    if "low_fat" not in claims or macros.fat_g is None:
        return None
    if macros.fat_g < 3:
        return None
    return Issue(
        id="US_LOW_FAT_THRESHOLD",
        category="claims",
        severity="medium",
        message=f"US market: 'low fat' requires <3g fat. Found {macros.fat_g:.1f}g.",
        hint="Reduce fat content or adjust the claim for the US market.",
        regulation_ref="21 CFR 101.62(b)(2)",
    )


def eu_high_protein(claims: Set[str], macros: MacroSnapshot) -> Optional[Issue]:
    if "high_protein" not in claims:
        return None
    protein = macros.protein_g or 0
    calories = macros.calories_kcal or 0
    if protein <= 0 or calories <= 0:
        return Issue(
            id="EU_HIGH_PROTEIN_DATA_MISSING",
            category="claims",
            severity="medium",
            message="EU market: cannot calculate protein energy percentage; data missing.",
            hint="Provide calories and protein per serving for EU validation.",
            regulation_ref=EU_REGULATION_REF,
        )
    percentage = protein * KCAL_PER_GRAM_PROTEIN / calories * 100
    if percentage >= EU_PROTEIN_ENERGY_MIN_PCT:
        return None
    return Issue(
        id="EU_HIGH_PROTEIN_THRESHOLD",
        category="claims",
        severity="medium",
        message=f"EU market: 'high protein' requires ≥20% energy from protein. Found {percentage:.1f}%.",
        hint="Increase protein or adjust serving size/claim for the EU market.",
        regulation_ref=EU_REGULATION_REF,
    )


MARKET_THRESHOLDS: Dict[str, List[ThresholdCheck]] = {
    "US": [us_high_protein, us_low_fat],
    "EU": [eu_high_protein],
    "FR": [eu_high_protein],
}


def apply_market_thresholds(
    markets: Optional[List[str]],
    claim_texts: Optional[List[str]],
    macros: MacroSnapshot,
) -> List[Issue]:
    """Run every threshold check for the requested markets (default US)."""
    claims = normalize_claims(claim_texts)
    if not claims:
        return []

    issues: List[Issue] = []
    for market in markets or ["US"]:
        checks = MARKET_THRESHOLDS.get(market.strip().upper())
        if not checks:
            logger.debug("No claim thresholds for market %s", market)
            continue
        for check in checks:
            issue = check(claims, macros)
            if issue:
                issues.append(issue)
    return issues
