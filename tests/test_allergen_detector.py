"""Tests for allergen inference and reconciliation."""

from compliance.allergens.detector import (
    detect_allergens,
    detect_allergens_for_request,
    infer_allergens_from_text,
)
from compliance.allergens.constants import GLUTEN_FREE_WHEAT_HINT
from compliance.models import ValidationRequest


def _missing(result):
    return [i for i in result.issues if i.id == "ALLERGEN_MISSING"]


class TestInference:
    """Tests for infer_allergens_from_text."""

    def test_ingredient_scan_tags_source_and_confidence(self):
        inferred = infer_allergens_from_text("", "sugar, whey powder, salt")
        milk = [d for d in inferred if d.name == "milk"]
        assert milk
        assert milk[0].source == "ingredients"
        assert milk[0].confidence == 0.6
        assert not milk[0].is_negated

    def test_label_scan_is_whole_word(self):
        """'egg' must not match inside 'eggplant'."""
        inferred = infer_allergens_from_text("Ingredients: eggplant, tomato")
        assert not [d for d in inferred if d.name == "egg"]

    def test_negated_rule_for_sans_gluten(self):
        inferred = infer_allergens_from_text("Produit Bio - Sans Gluten")
        negated = [d for d in inferred if d.negated]
        assert negated
        assert negated[0].name == "wheat"

    def test_negation_window_suppresses_positive_match(self):
        inferred = infer_allergens_from_text("Made without milk")
        milk = [d for d in inferred if d.name == "milk"]
        assert milk
        assert all(d.is_negated for d in milk)

    def test_far_away_negation_does_not_suppress(self):
        label = "Ingredients: milk, cocoa butter, cane sugar, vanilla. " + "x" * 60 + " no artificial colours"
        inferred = infer_allergens_from_text(label)
        assert any(d.name == "milk" and not d.is_negated for d in inferred)

    def test_french_flour_is_wheat(self):
        inferred = infer_allergens_from_text("Ingrédients: farine de blé, eau, sel")
        assert any(d.name == "wheat" and not d.is_negated for d in inferred)


class TestDetectAllergens:
    """Tests for detect_allergens."""

    def test_undeclared_milk_is_reported(self):
        result = detect_allergens(label_text="Ingredients: milk, sugar, vanilla extract")
        assert result.detected_allergens == ["milk"]
        missing = _missing(result)
        assert len(missing) == 1
        assert missing[0].severity == "high"
        assert missing[0].category == "allergen"
        assert missing[0].regulation_ref == "US 21 CFR 101.4; FALCPA"
        assert "milk" in missing[0].message

    def test_wheat_flour_is_reported(self):
        result = detect_allergens(label_text="Ingredients: wheat flour, water")
        assert "wheat" in result.detected_allergens
        assert any("wheat" in i.message for i in _missing(result))

    def test_gluten_free_alone_never_reports_wheat(self):
        for text in ("gluten-free", "Gluten Free crackers", "sans gluten"):
            result = detect_allergens(label_text=text)
            assert "wheat" not in result.detected_allergens, text
            assert not _missing(result), text

    def test_contains_statement_declares_allergen(self):
        result = detect_allergens(
            label_text="Ingredients: milk, sugar",
            contains_statement="Contains: Milk",
        )
        assert not _missing(result)
        assert "milk" in result.declared_allergens

    def test_contains_none_clears_everything(self):
        result = detect_allergens(
            label_text="Ingredients: wheat flour, milk, eggs",
            contains_statement="Contains: None",
        )
        assert result.issues == []
        assert result.detected_allergens == []

    def test_contains_none_gluten_free(self):
        result = detect_allergens(
            label_text="Produit Bio - Sans Gluten",
            contains_statement="Contains: None (Gluten-Free)",
        )
        assert result.issues == []

    def test_declared_field_is_canonicalized(self):
        result = detect_allergens(
            label_text="Ingredients: roasted peanuts, salt",
            declared_allergens=["Peanuts"],
        )
        assert "peanut" in result.detected_allergens
        assert not _missing(result)

    def test_allergens_field_is_merged_with_declared(self):
        result = detect_allergens(
            label_text="Ingredients: milk, soy lecithin",
            declared_allergens=["milk"],
            allergens=["soy"],
        )
        missing_messages = [i.message for i in _missing(result)]
        assert not any("milk" in m or "soy" in m for m in missing_messages)

    def test_gluten_free_flag_changes_wheat_hint(self):
        result = detect_allergens(label_text="Ingredients: wheat flour", gluten_free=True)
        wheat = [i for i in _missing(result) if "wheat" in i.message]
        assert wheat[0].hint == GLUTEN_FREE_WHEAT_HINT

    def test_contains_section_missing(self):
        result = detect_allergens(label_text="Ingredients: milk, sugar")
        ids = [i.id for i in result.issues]
        assert "CONTAINS_SECTION_MISSING" in ids
        section = [i for i in result.issues if i.id == "CONTAINS_SECTION_MISSING"][0]
        assert section.severity == "low"
        assert section.category == "format"

    def test_contains_keyword_in_label_satisfies_section(self):
        result = detect_allergens(label_text="Ingredients: milk, sugar. Contains: milk")
        assert "CONTAINS_SECTION_MISSING" not in [i.id for i in result.issues]

    def test_no_section_issue_without_allergens(self):
        result = detect_allergens(label_text="Ingredients: water, salt")
        assert result.issues == []

    def test_detection_is_idempotent(self):
        kwargs = dict(
            label_text="Ingredients: wheat flour, milk, eggs, soy lecithin",
            ingredients=["wheat flour", "milk"],
        )
        first = detect_allergens(**kwargs)
        second = detect_allergens(**kwargs)
        assert first.detected_allergens == second.detected_allergens
        assert first.issues == second.issues

    def test_request_adapter(self):
        request = ValidationRequest(label_text="Ingredients: milk", contains_statement="Contains: milk")
        result = detect_allergens_for_request(request)
        assert result.detected_allergens == ["milk"]
        assert not _missing(result)
