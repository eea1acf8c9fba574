"""Tests for the market rule engine and the US/EU/FR rule sets."""

import logging

import pytest

from compliance.models import Issue, ServingSize, ValidationRequest
from compliance.rules.engine import FunctionRule, Rule, RuleEngine
from compliance.rules.eu import EU_RULES, is_emphasized, requires_allergen_emphasis, requires_quid
from compliance.rules.fr import FR_RULES, recommends_nutri_score, requires_french_language
from compliance.rules.registry import build_default_rule_engine
from compliance.rules.us import requires_contains_section, requires_nutrition_facts, validate_serving_unit


def _ids(issues):
    return [i.id for i in issues]


def _issue(issue_id):
    return Issue(id=issue_id, severity="low", category="format", message=issue_id)


class ExplodingRule(Rule):
    id = "exploding"

    def evaluate(self, request, context):
        raise RuntimeError("rule bug")


def _request(**kwargs):
    kwargs.setdefault("label_text", "Nutrition Facts. Calories 100")
    return ValidationRequest(**kwargs)


class TestRuleEngine:

    def test_registry_is_read_only(self):
        engine = RuleEngine({"US": [FunctionRule("a", lambda r, c: [])]})
        with pytest.raises(TypeError):
            engine._registry["EU"] = ()
        assert isinstance(engine.rules_for("US"), tuple)

    def test_default_markets(self):
        engine = build_default_rule_engine()
        assert engine.markets == ["US", "EU", "FR"]

    def test_fr_runs_eu_rules_first(self):
        engine = build_default_rule_engine()
        assert engine.rules_for("FR") == EU_RULES + FR_RULES

    def test_unknown_market_is_ignored(self):
        engine = build_default_rule_engine()
        assert engine.execute(_request(), ["JP"]) == []

    def test_market_code_is_case_insensitive(self):
        engine = build_default_rule_engine()
        assert engine.rules_for("fr") == engine.rules_for("FR")

    def test_defaults_to_us(self):
        engine = RuleEngine({
            "US": [FunctionRule("us", lambda r, c: [_issue("US_ONLY")])],
            "EU": [FunctionRule("eu", lambda r, c: [_issue("EU_ONLY")])],
        })
        assert _ids(engine.execute(_request(), [])) == ["US_ONLY"]

    def test_context_carries_market(self):
        seen = []
        engine = RuleEngine({"EU": [FunctionRule("ctx", lambda r, c: seen.append(c["market"]) or [])]})
        engine.execute(_request(), ["eu"])
        assert seen == ["EU"]

    def test_rule_isolation(self, caplog):
        engine = RuleEngine({
            "US": [FunctionRule("us", lambda r, c: [_issue("US_FINDING")])],
            "EU": [
                ExplodingRule(),
                FunctionRule("eu", lambda r, c: [_issue("EU_FINDING")]),
            ],
        })
        with caplog.at_level(logging.ERROR, logger="compliance.rules.engine"):
            issues = engine.execute(_request(), ["EU", "US"])
        assert _ids(issues) == ["EU_FINDING", "US_FINDING"]
        assert "exploding" in caplog.text

    def test_run_level_dedup(self):
        engine = RuleEngine({
            "US": [FunctionRule("a", lambda r, c: [_issue("SAME"), _issue("SAME")])],
            "EU": [FunctionRule("b", lambda r, c: [_issue("SAME")])],
        })
        assert _ids(engine.execute(_request(), ["US", "EU"])) == ["SAME"]


class TestUsRules:

    def test_contains_section_missing(self):
        issues = requires_contains_section.evaluate(_request(label_text="Ingredients: milk, sugar"), {})
        assert _ids(issues) == ["US_CONTAINS_SECTION_MISSING"]

    def test_contains_section_present(self):
        request = _request(label_text="Ingredients: milk, sugar. Contains: milk")
        assert requires_contains_section.evaluate(request, {}) == []

    def test_contains_statement_field_counts(self):
        request = _request(label_text="Ingredients: milk, sugar", contains_statement="Contains: milk")
        assert requires_contains_section.evaluate(request, {}) == []

    def test_invalid_unit(self):
        request = _request(serving_size=ServingSize(value=2, unit="handful"))
        assert _ids(validate_serving_unit.evaluate(request, {})) == ["US_INVALID_SERVING_SIZE_UNIT"]

    @pytest.mark.parametrize("value", [0.5, 1500])
    def test_unusual_gram_serving(self, value):
        request = _request(serving_size=ServingSize(value=value, unit="g"))
        assert _ids(validate_serving_unit.evaluate(request, {})) == ["US_UNUSUAL_SERVING_SIZE"]

    def test_normal_serving(self):
        request = _request(serving_size=ServingSize(value=30, unit="g"))
        assert validate_serving_unit.evaluate(request, {}) == []

    def test_nutrition_facts_missing(self):
        issues = requires_nutrition_facts.evaluate(_request(label_text="Organic snack"), {})
        assert _ids(issues) == ["US_NUTRITION_FACTS_MISSING"]
        assert issues[0].severity == "high"

    def test_nutrition_keyword_present(self):
        assert requires_nutrition_facts.evaluate(_request(label_text="Total Fat 2g, Sodium 5mg"), {}) == []


class TestEuRules:

    def test_plain_allergen_is_flagged(self):
        issues = requires_allergen_emphasis.evaluate(_request(label_text="Ingredients: wheat flour, sugar"), {})
        assert _ids(issues) == ["EU_ALLERGEN_NOT_EMPHASIZED"]
        assert issues[0].severity == "high"
        assert "wheat" in issues[0].message

    @pytest.mark.parametrize("label", [
        "Ingredients: **wheat** flour, sugar",
        "Ingredients: _wheat_ flour, sugar",
        "Ingredients: WHEAT flour, sugar",
        "Ingredients: wheat flour, sugar\nAllergens: wheat",
    ])
    def test_emphasized_allergen(self, label):
        assert requires_allergen_emphasis.evaluate(_request(label_text=label), {}) == []

    def test_is_emphasized_markup(self):
        text = "a *milk* b"
        start = text.index("milk")
        assert is_emphasized(text, start, start + 4)

    def test_quid_missing(self):
        assert _ids(requires_quid.evaluate(_request(label_text="Ingredients: strawberries, sugar"), {})) == [
            "EU_QUID_MISSING",
        ]

    def test_quid_present(self):
        request = _request(label_text="Ingredients: strawberries (45%), sugar")
        assert requires_quid.evaluate(request, {}) == []


class TestFrRules:

    def test_french_text_detected(self):
        request = _request(label_text="Ingrédients: farine de blé, eau, sel")
        assert requires_french_language.evaluate(request, {}) == []

    def test_french_text_missing(self):
        issues = requires_french_language.evaluate(_request(label_text="Ingredients: flour, water"), {})
        assert _ids(issues) == ["FR_FRENCH_LANGUAGE_REQUIRED"]
        assert issues[0].severity == "medium"

    @pytest.mark.parametrize("label", ["Nutri-Score: B", "NUTRISCORE A", "nutri score c"])
    def test_nutri_score_present(self, label):
        assert recommends_nutri_score.evaluate(_request(label_text=label), {}) == []

    def test_nutri_score_missing(self):
        assert _ids(recommends_nutri_score.evaluate(_request(label_text="Valeurs nutritionnelles"), {})) == [
            "FR_NUTRISCORE_RECOMMENDED",
        ]
