import math
from typing import Optional
from compliance.models import MacroSnapshot, MacroValue, NutritionProfile
from compliance.claims.constants import GRAMS_PER_OUNCE, KJ_PER_KCAL


def _usable(value: Optional[float]) -> bool:
    return value is not None and not math.isnan(value)


def to_grams(value: Optional[float], unit: Optional[str]) -> Optional[float]:
    """mg → g, oz → g; unlabeled or unknown units are taken as grams."""
    if not _usable(value):
        return None
    normalized = (unit or "").strip().lower()
    if normalized in ("mg", "milligram", "milligrams"):
        return value / 1000
    if normalized in ("oz", "ounce", "ounces"):
        return value * GRAMS_PER_OUNCE
    return value


def to_kcal(value: Optional[float], unit: Optional[str]) -> Optional[float]:
    """kJ → kcal; unlabeled, kcal and Cal values are taken as-is."""
    if not _usable(value):
        return None
    normalized = (unit or "").strip().lower()
    if normalized in ("kj", "kilojoule", "kilojoules"):
        return value / KJ_PER_KCAL
    return value


def _grams(macro: Optional[MacroValue]) -> Optional[float]:
    return to_grams(macro.value, macro.unit) if macro else None


def snapshot_from_nutrition(nutrition: Optional[NutritionProfile]) -> MacroSnapshot:
    """Normalize a declared nutrition profile to grams / kcal."""
    if nutrition is None:
        return MacroSnapshot()
    calories = nutrition.calories
    return MacroSnapshot(
        protein_g=_grams(nutrition.protein),
        fat_g=_grams(nutrition.fat),
        carbs_g=_grams(nutrition.carbs),
        calories_kcal=to_kcal(calories.value, calories.unit) if calories else None,
    )


def merge_snapshots(*snapshots: Optional[MacroSnapshot]) -> MacroSnapshot:
    """Per field, take the first non-null value in priority order."""
    merged = {}
    for field in ("protein_g", "fat_g", "carbs_g", "calories_kcal"):
        for snapshot in snapshots:
            if snapshot is None:
                continue
            value = getattr(snapshot, field)
            if _usable(value):
                merged[field] = value
                break
    return MacroSnapshot(**merged)


def serving_size_in_grams(value: Optional[float], unit: Optional[str]) -> Optional[float]:
    if not _usable(value) or value <= 0:
        return None
    return to_grams(value, unit)
