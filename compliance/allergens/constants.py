from typing import Dict, List, Tuple

# FALCPA major allergens → label variants (EN / FR / ES)
ALLERGEN_VARIATIONS: Dict[str, List[str]] = {
    "milk": [
        "milk",
        "dairy",
        "lactose",
        "whey",
        "casein",
        "caseinate",
        "buttermilk",
        "cheese",
        "yogurt",
        "yoghurt",
        "ghee",
        "lait",
        "fromage",
        "leche",
    ],
    "egg": [
        "egg",
        "eggs",
        "albumin",
        "lecithin",  # can be egg-derived
        "oeuf",
        "œuf",
        "oeufs",
        "huevo",
    ],
    "fish": [
        "fish",
        "anchovy",
        "anchovies",
        "tuna",
        "salmon",
        "trout",
        "cod",
        "haddock",
        "poisson",
    ],
    "crustacean shellfish": [
        "shellfish",
        "shrimp",
        "prawn",
        "crab",
        "lobster",
        "crayfish",
        "crustacean",
        "crevette",
        "homard",
    ],
    "tree nut": [
        "tree nut",
        "tree nuts",
        "almond",
        "almonds",
        "walnut",
        "walnuts",
        "pecan",
        "cashew",
        "hazelnut",
        "pistachio",
        "noisette",
        "noix",
    ],
    "peanut": [
        "peanut",
        "peanuts",
        "groundnut",
        "cacahuète",
        "cacahuete",
        "arachide",
    ],
    "wheat": [
        "wheat",
        "gluten",
        "flour",
        "farine",
        "farine de blé",
        "blé",
        "ble",
        "semolina",
        "spelt",
        "durum",
    ],
    "soy": [
        "soy",
        "soya",
        "soybean",
        "soybeans",
        "tofu",
        "edamame",
        "soja",
    ],
    "sesame": [
        "sesame",
        "sesame seed",
        "tahini",
        "sésame",
        "sesamo",
    ],
}

# Regex rules run over the normalized label + ingredients text.
# (pattern, allergen, negated)
ALLERGEN_REGEX_RULES: List[Tuple[str, str, bool]] = [
    (r"\bcontains?\s+milk\b", "milk", False),
    (r"\bcontains?\s+eggs?\b", "egg", False),
    (r"\bcontains?\s+soy\b", "soy", False),
    (r"\bcontains?\s+peanuts?\b", "peanut", False),
    (r"\bcontains?\s+sesame\b", "sesame", False),
    (r"\bcontains?\s+tree\s+nuts?\b", "tree nut", False),
    (r"\bmay\s+contain\b.*\bwheat\b", "wheat", False),
    (r"\bfarine\s+de\s+bl[eé]\b", "wheat", False),
    (r"\bgluten\b", "wheat", False),
    (r"\bsans\s+gluten\b", "wheat", True),
    (r"\bgluten[-\s]?free\b", "wheat", True),
    (r"\bhypoallergenic\b", "milk", True),
]

# Confidence by detection source
RULE_CONFIDENCE = 0.7
NEGATED_RULE_CONFIDENCE = 0.4
INGREDIENT_CONFIDENCE = 0.6
LABEL_SCAN_CONFIDENCE = 0.5

# Contains statement vocabulary
CONTAINS_KEYWORDS = ["contains", "contain", "contient", "contiennent"]
DECLARES_NONE_TERMS = ["none", "no", "free", "aucun", "aucune"]

GLUTEN_FREE_WHEAT_HINT = (
    "Product marked gluten-free but wheat was detected. "
    "Verify formulation or update glutenFree flag."
)
DEFAULT_MISSING_HINT = "Add to 'allergens' array or 'containsStatement'."
ALLERGEN_REGULATION_REF = "US 21 CFR 101.4; FALCPA"

# EU Regulation (EU) 1169/2011 Annex II allergens → label terms
EU_MAJOR_ALLERGENS: Dict[str, List[str]] = {
    "celery": ["celery", "celeriac"],
    "cereals containing gluten": ["wheat", "rye", "barley", "oats", "spelt", "gluten"],
    "crustaceans": ["crustaceans", "shrimp", "prawn", "crab", "lobster"],
    "eggs": ["egg", "eggs"],
    "fish": ["fish", "anchovy", "tuna", "salmon", "cod"],
    "lupin": ["lupin"],
    "milk": ["milk", "lactose", "whey", "casein", "cheese", "butter", "cream"],
    "molluscs": ["molluscs", "mussels", "oysters", "squid"],
    "mustard": ["mustard"],
    "peanuts": ["peanut", "peanuts"],
    "sesame": ["sesame", "tahini"],
    "soybeans": ["soy", "soya", "soybeans"],
    "sulphur dioxide": ["sulphur dioxide", "sulphites", "sulfites"],
    "tree nuts": ["almond", "almonds", "hazelnut", "hazelnuts", "walnut", "walnuts", "cashew", "pecan", "pistachio"],
}
