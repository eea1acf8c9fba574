"""Tests for serving size validation."""

import pytest

from compliance.models import ServingSize
from compliance.serving_size.validator import validate_serving_size


def _ids(issues):
    return [i.id for i in issues]


class TestValidateServingSize:

    def test_missing(self):
        issues = validate_serving_size(None)
        assert _ids(issues) == ["SERVING_SIZE_MISSING"]
        assert issues[0].regulation_ref == "US 21 CFR 101.9"

    def test_valid(self):
        assert validate_serving_size(ServingSize(value=30, unit="g")) == []

    @pytest.mark.parametrize("value", [-5, 0, None])
    def test_non_positive_value(self, value):
        issues = validate_serving_size(ServingSize(value=value, unit="g"))
        assert "SERVING_SIZE_INVALID" in _ids(issues)

    def test_nan_value(self):
        issues = validate_serving_size(ServingSize(value=float("nan"), unit="g"))
        assert "SERVING_SIZE_INVALID" in _ids(issues)

    def test_unit_missing(self):
        issues = validate_serving_size(ServingSize(value=30))
        assert _ids(issues) == ["SERVING_SIZE_UNIT_MISSING"]

    def test_unit_not_recognized(self):
        issues = validate_serving_size(ServingSize(value=2, unit="handful"))
        assert _ids(issues) == ["SERVING_SIZE_UNIT_INVALID"]
        assert issues[0].severity == "low"

    def test_unit_is_case_insensitive(self):
        assert validate_serving_size(ServingSize(value=1, unit=" Cup ")) == []
