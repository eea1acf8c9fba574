import re
from typing import Iterable, List, Optional, Sequence, Union
from compliance.models import Issue, MAJOR_US_ALLERGENS, ValidationRequest
from compliance.text import find_word_spans, is_negated_nearby, normalize_text
from compliance.allergens.constants import (
    ALLERGEN_REGEX_RULES,
    ALLERGEN_REGULATION_REF,
    DEFAULT_MISSING_HINT,
    GLUTEN_FREE_WHEAT_HINT,
    INGREDIENT_CONFIDENCE,
    LABEL_SCAN_CONFIDENCE,
    NEGATED_RULE_CONFIDENCE,
    RULE_CONFIDENCE,
)
from compliance.allergens.contains_statement import (
    canonicalize_allergens,
    get_allergen_variations,
    parse_contains_statement,
)
from compliance.allergens.models import AllergenDetectionResult, AllergenSource, InferredAllergen


def _plain_ingredients(ingredients: Optional[Union[str, Sequence[str]]]) -> str:
    if not ingredients:
        return ""
    if isinstance(ingredients, (list, tuple)):
        return " ".join(str(item) for item in ingredients).strip()
    return ingredients


def _dedupe(values: Iterable[str]) -> List[str]:
    seen = []
    for value in values:
        value = value.strip().lower()
        if value and value not in seen:
            seen.append(value)
    return seen


def _scan_synonyms(text: str, allergen: str, source: AllergenSource, confidence: float) -> Optional[InferredAllergen]:
    """
    Find the first mention of an allergen that is not next to a negation term.
    If every mention is negated, return the first one marked suppressed so it
    still shows up in the inferred list.
    """
    spans = []
    for synonym in get_allergen_variations(allergen):
        for start, end in find_word_spans(text, synonym):
            spans.append((start, end))
    if not spans:
        return None

    spans.sort()
    for start, end in spans:
        if not is_negated_nearby(text, start, end):
            return InferredAllergen(
                name=allergen,
                matched_text=text[start:end],
                source=source,
                confidence=confidence,
                start=start,
            )

    start, end = spans[0]
    return InferredAllergen(
        name=allergen,
        matched_text=text[start:end],
        source=source,
        suppressed=True,
        confidence=confidence,
        start=start,
    )


def infer_allergens_from_text(
    label_text: str = "",
    ingredients: Optional[Union[str, Sequence[str]]] = None,
) -> List[InferredAllergen]:
    """
    Infer allergen mentions from label text and ingredients.

    Three passes, in this order:
    1. Regex rules over label + ingredients (some rules are negated,
       e.g. "sans gluten").
    2. Synonym scan of the ingredients alone (lower confidence).
    3. Synonym scan of the label text alone.
    Positive matches with a negation term within the window are marked
    suppressed.
    """
    ingredients_text = _plain_ingredients(ingredients)
    combined = normalize_text(f"{label_text or ''} {ingredients_text}")
    if not combined:
        return []

    inferred: List[InferredAllergen] = []
    seen = set()

    for pattern, allergen, negated in ALLERGEN_REGEX_RULES:
        for match in re.finditer(pattern, combined, re.IGNORECASE):
            matched_text = match.group(0)
            key = (allergen, matched_text, negated)
            if key in seen:
                continue
            seen.add(key)
            inferred.append(InferredAllergen(
                name=allergen,
                matched_text=matched_text,
                source="labelText",
                negated=negated,
                suppressed=not negated and is_negated_nearby(combined, match.start(), match.end()),
                confidence=NEGATED_RULE_CONFIDENCE if negated else RULE_CONFIDENCE,
                start=match.start(),
            ))

    norm_ingredients = normalize_text(ingredients_text)
    if norm_ingredients:
        for allergen in MAJOR_US_ALLERGENS:
            detection = _scan_synonyms(norm_ingredients, allergen, "ingredients", INGREDIENT_CONFIDENCE)
            if detection:
                inferred.append(detection)

    norm_label = normalize_text(label_text or "")
    if norm_label:
        for allergen in MAJOR_US_ALLERGENS:
            detection = _scan_synonyms(norm_label, allergen, "labelText", LABEL_SCAN_CONFIDENCE)
            if detection:
                inferred.append(detection)

    return inferred


def _canonical_declared(declared: Iterable[str]) -> List[str]:
    names: List[str] = []
    for raw in declared:
        if not raw or not raw.strip():
            continue
        canonical = canonicalize_allergens(raw) or [raw.strip().lower()]
        for name in canonical:
            if name not in names:
                names.append(name)
    return names


def detect_allergens(
    label_text: str = "",
    ingredients: Optional[Union[str, Sequence[str]]] = None,
    declared_allergens: Optional[Sequence[str]] = None,
    allergens: Optional[Sequence[str]] = None,
    contains_statement: Optional[str] = None,
    gluten_free: Optional[bool] = None,
) -> AllergenDetectionResult:
    """
    Detect allergens in label text / ingredients and reconcile them against
    what the label declares.

    Returns:
        AllergenDetectionResult with detected (lowercase, deduplicated),
        declared (field ∪ contains statement), the raw inferred list and
        ALLERGEN_MISSING / CONTAINS_SECTION_MISSING issues.
    """
    contains_info = parse_contains_statement(contains_statement)
    declared = _canonical_declared(list(declared_allergens or []) + list(allergens or []))
    declared_union = _dedupe(declared + contains_info.declared_allergens)
    declared_set = set(declared_union)

    inferred = infer_allergens_from_text(label_text, ingredients)

    # "Contains: None" overrides everything found in the text
    if contains_info.declares_none:
        return AllergenDetectionResult(
            detected_allergens=[],
            declared_allergens=declared_union,
            inferred=inferred,
            issues=[],
        )

    issues: List[Issue] = []
    detected: List[str] = []

    for detection in inferred:
        if detection.is_negated:
            continue
        canonical = detection.name.lower()
        if canonical in detected:
            continue
        detected.append(canonical)

        if canonical not in declared_set:
            hint = GLUTEN_FREE_WHEAT_HINT if gluten_free and canonical == "wheat" else DEFAULT_MISSING_HINT
            issues.append(Issue(
                id="ALLERGEN_MISSING",
                category="allergen",
                severity="high",
                message=f"Detected undeclared allergen: {detection.name}",
                hint=hint,
                regulation_ref=ALLERGEN_REGULATION_REF,
            ))

    ingredients_text = _plain_ingredients(ingredients)
    lower_label = (label_text or "").lower()
    has_ingredients_keyword = "ingredient" in lower_label or "ingredient" in ingredients_text.lower()
    has_contains = bool(contains_info.raw) or "contains" in lower_label or "contient" in lower_label

    if has_ingredients_keyword and not has_contains and detected:
        issues.append(Issue(
            id="CONTAINS_SECTION_MISSING",
            category="format",
            severity="low",
            message="Detected allergens but no 'Contains' statement is present.",
            hint="Add a 'Contains:' statement to clearly declare major allergens.",
        ))

    return AllergenDetectionResult(
        detected_allergens=detected,
        declared_allergens=declared_union,
        inferred=inferred,
        issues=issues,
    )


def detect_allergens_for_request(request: ValidationRequest) -> AllergenDetectionResult:
    return detect_allergens(
        label_text=request.label_text,
        ingredients=request.ingredients,
        declared_allergens=request.declared_allergens,
        allergens=request.allergens,
        contains_statement=request.contains_statement,
        gluten_free=request.gluten_free,
    )
