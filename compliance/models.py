"""
Label validation data model.

Python attributes are snake_case; the JSON contract shared with HTTP callers
uses the camelCase aliases (labelText, regulationRef, allergensFound, ...).
Dump with ``model_dump(by_alias=True, exclude_none=True)``.
"""

from typing import Iterable, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


IssueSeverity = Literal["low", "medium", "high"]
IssueCategory = Literal[
    "allergen",
    "serving",
    "claims",
    "format",
    "ingredient",
    "nutrition",
    "input",
    "system",
]

# Heuristic, non-legal claim thresholds (per serving)
CLAIM_THRESHOLDS = {
    "HIGH_PROTEIN_MIN_G": 10.0,
    "LOW_FAT_MAX_G": 3.0,
    "SUGAR_FREE_MAX_G": 0.5,
}

# FALCPA major allergens
MAJOR_US_ALLERGENS = (
    "milk",
    "egg",
    "fish",
    "crustacean shellfish",
    "tree nut",
    "peanut",
    "wheat",
    "soy",
    "sesame",
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Issue(CamelModel):
    """A single compliance finding. Identity for deduplication is ``id`` alone."""
    id: str
    severity: IssueSeverity
    category: IssueCategory
    message: str
    hint: Optional[str] = None
    regulation_ref: Optional[str] = None


class ServingSize(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    value: Optional[float] = None
    unit: Optional[str] = None


class MacroValue(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    value: Optional[float] = None
    unit: Optional[str] = None


class NutritionProfile(CamelModel):
    """Per-macro declared values, in whatever unit the label uses."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    calories: Optional[MacroValue] = None
    protein: Optional[MacroValue] = None
    fat: Optional[MacroValue] = None
    carbs: Optional[MacroValue] = None
    fiber: Optional[MacroValue] = None
    sugar: Optional[MacroValue] = None


class MacroSnapshot(CamelModel):
    """Macros normalized to grams / kilocalories."""
    protein_g: Optional[float] = None
    fat_g: Optional[float] = None
    carbs_g: Optional[float] = None
    calories_kcal: Optional[float] = None


class FoodSummary(CamelModel):
    """Reference food record returned by the food-search collaborator."""
    fdc_id: int
    description: str
    brand_owner: Optional[str] = None
    gtin_upc: Optional[str] = None
    data_type: str
    serving_size: Optional[float] = None
    serving_size_unit: Optional[str] = None
    calories_kcal: Optional[float] = None
    macros: MacroSnapshot = Field(default_factory=MacroSnapshot)


class ValidationRequest(CamelModel):
    """
    Raw label validation input. Immutable once constructed: collections are
    tuples (JSON arrays are converted) and nested values are frozen models.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    label_text: str = Field(..., min_length=1)
    markets: Tuple[str, ...] = ("US",)
    declared_allergens: Tuple[str, ...] = ()
    allergens: Tuple[str, ...] = ()
    ingredients: Optional[Union[str, Tuple[str, ...]]] = None
    contains_statement: Optional[str] = None
    serving_size: Optional[ServingSize] = None
    reference_food_query: Optional[str] = None
    product_name: Optional[str] = None
    claim_texts: Tuple[str, ...] = ()
    nutrition: Optional[NutritionProfile] = None
    gluten_free: Optional[bool] = None

    @property
    def ingredients_text(self) -> str:
        """Ingredients as one string (sequences are joined with spaces)."""
        if not self.ingredients:
            return ""
        if isinstance(self.ingredients, tuple):
            return " ".join(self.ingredients).strip()
        return self.ingredients


class ReportSummary(CamelModel):
    allergens_found: Optional[List[str]] = None
    total_issues: int


class ReportContext(CamelModel):
    foods: List[FoodSummary] = Field(default_factory=list)
    chosen: Optional[FoodSummary] = None
    warnings: Optional[List[str]] = None


class ValidationReport(CamelModel):
    valid: bool
    issues: List[Issue]
    summary: ReportSummary
    context: Optional[ReportContext] = None

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


def dedupe_issues(issues: Iterable[Issue]) -> List[Issue]:
    """Keep the first issue seen for each id, preserving order."""
    seen = set()
    unique: List[Issue] = []
    for issue in issues:
        if issue.id in seen:
            continue
        seen.add(issue.id)
        unique.append(issue)
    return unique
