"""Tests for the "Contains:" statement parser."""

from compliance.allergens.contains_statement import (
    canonicalize_allergens,
    get_allergen_variations,
    parse_contains_statement,
)


class TestParseContainsStatement:

    def test_empty_statement(self):
        parsed = parse_contains_statement(None)
        assert parsed.declared_allergens == []
        assert parsed.declares_none is False
        assert parsed.raw is None

    def test_lists_allergens_in_order(self):
        parsed = parse_contains_statement("Contains: Milk, Soy and Wheat")
        assert parsed.declared_allergens == ["milk", "soy", "wheat"]
        assert parsed.declares_none is False

    def test_french_statement(self):
        parsed = parse_contains_statement("Contient : lait et oeufs")
        assert parsed.declared_allergens == ["milk", "egg"]

    def test_parenthesised_text_is_ignored(self):
        parsed = parse_contains_statement("Contains: milk (from cultured whey), tree nuts (almonds)")
        assert parsed.declared_allergens == ["milk", "tree nut"]

    def test_declares_none(self):
        assert parse_contains_statement("Contains: None").declares_none is True
        assert parse_contains_statement("Contains no allergens").declares_none is True
        assert parse_contains_statement("Contient: aucun allergène").declares_none is True

    def test_no_contains_keyword_is_not_declares_none(self):
        assert parse_contains_statement("None").declares_none is False


class TestVariations:

    def test_known_allergen(self):
        variations = get_allergen_variations("wheat")
        assert "wheat" in variations
        assert "farine de blé" in variations

    def test_unknown_allergen_returns_itself(self):
        assert get_allergen_variations("Lupin") == ["lupin"]

    def test_canonicalize(self):
        assert canonicalize_allergens("Peanuts and almonds") == ["tree nut", "peanut"]
