"""
USDA FoodData Central search adapter.

Posts to /foods/search and maps each hit into a FoodSummary with macros in
grams and energy in kcal. No retry, caching or circuit breaking happens here;
failures surface as FoodSearchError and the caller degrades gracefully.

API Reference: https://fdc.nal.usda.gov/api-guide.html
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional
import requests
from pydantic import ValidationError
from compliance.config import Settings, get_settings
from compliance.models import CamelModel, FoodSummary, MacroSnapshot
from compliance.food_search.models import (
    FoodSearch,
    FoodSearchError,
    FoodSearchMeta,
    FoodSearchResult,
    LookupCancelled,
)

logger = logging.getLogger(__name__)

# FDC nutrient numbers → expected name fragment
NUTRIENT_NUMBER_TO_NAME = {
    "1003": "protein",
    "1004": "total lipid",
    "1005": "carbohydrate",
    "1008": "energy",
}


class UsdaNutrient(CamelModel):
    # /foods/search uses nutrientNumber/nutrientName; detail payloads use number/name
    number: Optional[str] = None
    name: Optional[str] = None
    nutrient_number: Optional[str] = None
    nutrient_name: Optional[str] = None
    nutrient_id: Optional[int] = None
    unit_name: Optional[str] = None
    value: Optional[float] = None

    @property
    def code(self) -> Optional[str]:
        return self.number or self.nutrient_number

    @property
    def label(self) -> str:
        return (self.name or self.nutrient_name or "").lower()


class UsdaFood(CamelModel):
    fdc_id: int
    description: str
    brand_owner: Optional[str] = None
    data_type: str
    gtin_upc: Optional[str] = None
    serving_size: Optional[float] = None
    serving_size_unit: Optional[str] = None
    food_nutrients: List[UsdaNutrient] = []


class UsdaSearchResponse(CamelModel):
    total_hits: int = 0
    foods: List[UsdaFood] = []


def _round(value: float) -> float:
    return round(value * 100) / 100


def to_grams(value: Optional[float], unit_name: Optional[str]) -> Optional[float]:
    """Convert a nutrient amount to grams; unlabeled values are assumed to be grams."""
    if value is None or value != value:
        return None
    unit = (unit_name or "").strip().lower()
    if unit in ("mg", "milligram", "milligrams"):
        return _round(value / 1000)
    return _round(value)


def to_kcal(value: Optional[float], unit_name: Optional[str]) -> Optional[float]:
    """Convert energy to kcal; unlabeled values are assumed to be kcal."""
    if value is None or value != value:
        return None
    unit = (unit_name or "").strip().lower()
    if unit in ("kj", "kilojoule", "kilojoules"):
        return _round(value / 4.184)
    return _round(value)


def _find_nutrient(nutrients: List[UsdaNutrient], number: str) -> Optional[UsdaNutrient]:
    for nutrient in nutrients:
        if nutrient.code == number:
            return nutrient
    expected = NUTRIENT_NUMBER_TO_NAME.get(number)
    if expected:
        for nutrient in nutrients:
            if expected in nutrient.label:
                return nutrient
    return None


def _find_energy(nutrients: List[UsdaNutrient]) -> Optional[UsdaNutrient]:
    # Prefer the kcal row when both kcal and kJ energy rows are present
    energy_rows = [n for n in nutrients if n.code == "1008" or "energy" in n.label]
    for nutrient in energy_rows:
        if (nutrient.unit_name or "").lower() == "kcal":
            return nutrient
    return energy_rows[0] if energy_rows else None


def map_usda_food(food: UsdaFood) -> FoodSummary:
    """Map a USDA search hit to a FoodSummary."""
    nutrients = food.food_nutrients or []
    energy = _find_energy(nutrients)
    protein = _find_nutrient(nutrients, "1003")
    fat = _find_nutrient(nutrients, "1004")
    carbs = _find_nutrient(nutrients, "1005")
    calories = to_kcal(energy.value, energy.unit_name) if energy else None

    return FoodSummary(
        fdc_id=food.fdc_id,
        description=food.description,
        brand_owner=food.brand_owner,
        gtin_upc=food.gtin_upc,
        data_type=food.data_type,
        serving_size=food.serving_size,
        serving_size_unit=food.serving_size_unit,
        calories_kcal=calories,
        macros=MacroSnapshot(
            protein_g=to_grams(protein.value, protein.unit_name) if protein else None,
            fat_g=to_grams(fat.value, fat.unit_name) if fat else None,
            carbs_g=to_grams(carbs.value, carbs.unit_name) if carbs else None,
            calories_kcal=calories,
        ),
    )


class UsdaFoodSearch(FoodSearch):
    """
    FoodSearch backed by the USDA FoodData Central API.

    Usage:
        client = UsdaFoodSearch(api_key="your_key")
        # or
        client = UsdaFoodSearch.from_settings()  # reads USDA_API_KEY

        result = await client.search("greek yogurt", limit=10)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.nal.usda.gov/fdc/v1",
        timeout: float = 8.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ValueError("USDA API key is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> Optional["UsdaFoodSearch"]:
        """Build a client from settings, or None when no API key is configured."""
        settings = settings or get_settings()
        if not settings.usda_api_key:
            return None
        return cls(
            api_key=settings.usda_api_key,
            base_url=settings.usda_base_url,
            timeout=settings.food_search_timeout_seconds,
        )

    async def search(self, query, limit, cancel_event=None):
        if cancel_event is not None and cancel_event.is_set():
            raise LookupCancelled()
        return await asyncio.to_thread(self.search_sync, query, limit)

    def search_sync(self, query: str, limit: int) -> FoodSearchResult:
        url = f"{self.base_url}/foods/search"
        body: Dict[str, Any] = {
            "query": query,
            "pageSize": limit,
            "requireAllWords": False,
        }

        try:
            response = self.session.post(
                url,
                params={"api_key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise FoodSearchError("TIMEOUT", f"Request to USDA API timed out: {e}") from e
        except requests.RequestException as e:
            raise FoodSearchError("NETWORK_ERROR", f"Failed to fetch food data: {e}") from e

        if response.status_code != 200:
            raise FoodSearchError("HTTP_ERROR", f"USDA API returned {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise FoodSearchError("INVALID_RESPONSE", "USDA API returned non-JSON body") from e

        try:
            parsed = UsdaSearchResponse.model_validate(payload)
        except ValidationError as e:
            raise FoodSearchError("INVALID_RESPONSE", f"Schema validation failed: {e.error_count()} errors") from e

        items = [map_usda_food(food) for food in parsed.foods]
        logger.debug("USDA search '%s' returned %d of %d hits", query, len(items), parsed.total_hits)
        return FoodSearchResult(
            items=items,
            meta=FoodSearchMeta(total_hits=parsed.total_hits, limit=limit),
        )
