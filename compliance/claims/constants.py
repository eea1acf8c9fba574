from typing import Dict
from compliance.models import MacroSnapshot

# Claim phrase → canonical claim key
CLAIM_PHRASES: Dict[str, str] = {
    "high protein": "high_protein",
    "high in protein": "high_protein",
    "low fat": "low_fat",
    "low in fat": "low_fat",
    "sugar free": "sugar_free",
}

# Last-resort macro averages, keyed by product-name substring (longest first wins)
MACRO_FALLBACKS: Dict[str, MacroSnapshot] = {
    "greek yogurt": MacroSnapshot(protein_g=12, fat_g=4, carbs_g=6),
    "yogurt": MacroSnapshot(protein_g=9, fat_g=4, carbs_g=9),
    "cottage cheese": MacroSnapshot(protein_g=11, fat_g=4, carbs_g=3),
    "protein bar": MacroSnapshot(protein_g=20, fat_g=8, carbs_g=24),
    "peanut butter": MacroSnapshot(protein_g=7, fat_g=16, carbs_g=6),
}

# Units accepted for serving-size proximity scoring
MATCHER_SERVING_UNITS = {"g", "gram", "grams", "oz", "ounce", "ounces"}

# FoodMatcher weights
NAME_WEIGHT = 0.6
SERVING_WEIGHT = 0.25
MACRO_COMPLETENESS_WEIGHT = 0.15
PROTEIN_CLAIM_WEIGHT = 0.2
SERVING_TOLERANCE = 0.2
PROTEIN_BONUS_REFERENCE_G = 20.0

GRAMS_PER_OUNCE = 28.3495
KJ_PER_KCAL = 4.184

FDC_LOOKUP_FAILED_HINT = "Check API key or provide explicit nutrition data."
