from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from compliance.models import FoodSummary, Issue, MacroSnapshot


class FoodSelection(BaseModel):
    """Best reference food among search candidates."""
    food: Optional[FoodSummary] = None
    score: Optional[float] = None
    warnings: List[str] = Field(default_factory=list)
    fallback_macros: Optional[MacroSnapshot] = None


class ClaimEvaluationResult(BaseModel):
    """Claim issues plus the reference-food context used to check them."""
    issues: List[Issue] = Field(default_factory=list)
    foods: List[FoodSummary] = Field(default_factory=list)
    chosen_food: Optional[FoodSummary] = None
    macros: MacroSnapshot = Field(default_factory=MacroSnapshot)
    source: Literal["fdc", "fallback", "input", "none"] = "none"
    warnings: List[str] = Field(default_factory=list)
