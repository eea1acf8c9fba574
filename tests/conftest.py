"""Shared fixtures for the label compliance tests."""

import pytest

from compliance.config import get_settings
from compliance.models import FoodSummary, MacroSnapshot
from compliance.orchestrator import get_default_food_search


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Run every test without a USDA key and with fresh settings."""
    monkeypatch.delenv("USDA_API_KEY", raising=False)
    get_settings.cache_clear()
    get_default_food_search.cache_clear()
    yield
    get_settings.cache_clear()
    get_default_food_search.cache_clear()


@pytest.fixture
def make_food():
    """Factory for FoodSummary records."""
    def _make(fdc_id=1, description="Food", protein=None, fat=None, carbs=None,
              calories=None, serving_size=None, serving_size_unit=None, data_type="Branded"):
        return FoodSummary(
            fdc_id=fdc_id,
            description=description,
            data_type=data_type,
            serving_size=serving_size,
            serving_size_unit=serving_size_unit,
            calories_kcal=calories,
            macros=MacroSnapshot(protein_g=protein, fat_g=fat, carbs_g=carbs, calories_kcal=calories),
        )
    return _make
