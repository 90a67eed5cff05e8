"""Domain models for user-authored foods."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from scanmycarbs.domain.nutrition import CanonicalFood, FoodSource, MacroProfile


@dataclass(frozen=True)
class ManualFood:
    """Represents a food entered by hand and owned by a single user."""

    id: UUID
    user_id: UUID
    name: str
    brand: str | None
    category: str | None
    barcode: str | None
    macros: MacroProfile
    created_at: datetime | None


def manual_to_canonical(food: ManualFood) -> CanonicalFood:
    """Expose a manual food through the canonical food shape."""
    return CanonicalFood(
        external_id=str(food.id),
        name=food.name,
        source=FoodSource.MANUAL,
        macros=food.macros,
        brand=food.brand,
        barcode=food.barcode,
    )
