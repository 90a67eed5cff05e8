"""Nutrition domain models."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class FoodSource(StrEnum):
    """Origin of a canonical food record."""

    NATIONAL_DB = "ciqual"
    PACKAGED_PRODUCT = "openfoodfacts"
    MANUAL = "manual"


@dataclass(frozen=True)
class MacroProfile:
    """Macronutrient profile for a food item."""

    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float


ZERO_MACROS = MacroProfile(calories=0.0, protein_g=0.0, fat_g=0.0, carbs_g=0.0)


@dataclass(frozen=True)
class CanonicalFood:
    """Provider-independent food record with macros per 100 g."""

    external_id: str
    name: str
    source: FoodSource
    macros: MacroProfile
    brand: str | None = None
    barcode: str | None = None


@dataclass(frozen=True)
class CachedFoodEntry:
    """Canonical food stored in the local cache."""

    food: CanonicalFood
    cached_at: datetime
