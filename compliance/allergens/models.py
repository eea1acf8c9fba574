from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from compliance.models import Issue


AllergenSource = Literal["labelText", "ingredients", "containsStatement"]


class InferredAllergen(BaseModel):
    """A single allergen mention found in label text or ingredients."""
    name: str
    matched_text: str
    source: AllergenSource
    negated: bool = False
    suppressed: bool = False  # negation term found near the match
    confidence: float
    start: Optional[int] = None

    @property
    def is_negated(self) -> bool:
        return self.negated or self.suppressed


class ContainsStatementParse(BaseModel):
    """Allergens declared by a "Contains:" / "Contient:" statement."""
    declared_allergens: List[str]
    declares_none: bool
    raw: Optional[str] = None


class AllergenDetectionResult(BaseModel):
    """Complete allergen detection result."""
    detected_allergens: List[str] = Field(default_factory=list)
    declared_allergens: List[str] = Field(default_factory=list)
    inferred: List[InferredAllergen] = Field(default_factory=list)
    issues: List[Issue] = Field(default_factory=list)
