"""Domain models for scan records."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from scanmycarbs.domain.nutrition import CanonicalFood, FoodSource, MacroProfile

DEFAULT_QUANTITY_G = 100.0


@dataclass(frozen=True)
class ResolvedFoodLine:
    """A canonical food paired with the consumed quantity in grams."""

    food: CanonicalFood
    quantity_g: float


@dataclass(frozen=True)
class ScanFoodLine:
    """Materialized snapshot of one food inside a scan."""

    name: str
    quantity_g: float
    source: FoodSource
    source_id: str | None
    brand: str | None
    per_100g: MacroProfile
    portion: MacroProfile


@dataclass(frozen=True)
class ScanRecord:
    """A persisted scan with totals fixed at creation time."""

    id: UUID
    user_id: UUID
    scanned_at: datetime
    meal_type: str | None
    notes: str | None
    image_url: str | None
    totals: MacroProfile
    foods: list[ScanFoodLine]


@dataclass(frozen=True)
class ScanPage:
    """One page of a user's scan history."""

    scans: list[ScanRecord]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        """Number of pages for the current limit."""
        if self.limit <= 0:
            return 0
        return -(-self.total // self.limit)
