"""Scan aggregation and history service."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from scanmycarbs.adapters.parsing import to_float
from scanmycarbs.domain.nutrition import (
    ZERO_MACROS,
    CanonicalFood,
    FoodSource,
    MacroProfile,
)
from scanmycarbs.domain.scans import (
    DEFAULT_QUANTITY_G,
    ResolvedFoodLine,
    ScanFoodLine,
    ScanPage,
    ScanRecord,
)
from scanmycarbs.errors import NotFoundError, ValidationError

MAX_PAGE_SIZE = 100

_logger = logging.getLogger(__name__)


class ScanRepository(Protocol):
    """Persistence interface for scans and their food lines."""

    def create_scan(  # noqa: PLR0913
        self,
        user_id: UUID,
        scanned_at: datetime,
        meal_type: str | None,
        notes: str | None,
        image_url: str | None,
        totals: MacroProfile,
        foods: list[ScanFoodLine],
    ) -> ScanRecord:
        """Persist a scan and all of its lines in one transaction."""

    def get_scan(self, scan_id: UUID) -> ScanRecord | None:
        """Return a scan with its lines."""

    def list_scans(
        self,
        user_id: UUID,
        offset: int,
        limit: int,
        start: datetime | None,
        end: datetime | None,
    ) -> tuple[list[ScanRecord], int]:
        """Return a page of scans, newest first, and the total count."""

    def update_scan(self, scan_id: UUID, changes: dict[str, object]) -> ScanRecord:
        """Update the mutable fields of a scan."""

    def delete_scan(self, scan_id: UUID) -> None:
        """Delete a scan and its lines."""

    def delete_for_user(self, user_id: UUID) -> None:
        """Delete every scan owned by a user."""


@dataclass
class ScanService:
    """Computes scan totals and manages a user's scan history."""

    repository: ScanRepository

    def create_scan(  # noqa: PLR0913
        self,
        user_id: UUID,
        foods: list[dict[str, object]] | None,
        meal_type: str | None = None,
        notes: str | None = None,
        image_url: str | None = None,
    ) -> ScanRecord:
        """Scale every line by quantity, sum the totals and persist the scan."""
        if not foods:
            raise ValidationError("Food list is required")
        lines = [materialize_line(parse_food_line(item)) for item in foods]
        totals = sum_totals(lines)
        scan = self.repository.create_scan(
            user_id=user_id,
            scanned_at=datetime.now(tz=UTC),
            meal_type=meal_type,
            notes=notes,
            image_url=image_url,
            totals=totals,
            foods=lines,
        )
        _logger.info("Created scan %s with %s foods", scan.id, len(lines))
        return scan

    def list_scans(  # noqa: PLR0913
        self,
        user_id: UUID,
        page: int = 1,
        limit: int = 20,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> ScanPage:
        """Return a page of the user's scans, newest first."""
        if page < 1 or limit < 1:
            raise ValidationError("Page and limit must be positive integers")
        limit = min(limit, MAX_PAGE_SIZE)
        scans, total = self.repository.list_scans(
            user_id, offset=(page - 1) * limit, limit=limit, start=start, end=end
        )
        return ScanPage(scans=scans, page=page, limit=limit, total=total)

    def get_scan(self, user_id: UUID, scan_id: UUID) -> ScanRecord:
        """Return a scan owned by the user."""
        scan = self.repository.get_scan(scan_id)
        if scan is None or scan.user_id != user_id:
            raise NotFoundError("Scan not found")
        return scan

    def update_scan(
        self, user_id: UUID, scan_id: UUID, changes: dict[str, object]
    ) -> ScanRecord:
        """Update meal type and notes; every other field is immutable."""
        scan = self.get_scan(user_id, scan_id)
        allowed: dict[str, object] = {}
        if changes.get("meal_type"):
            allowed["meal_type"] = changes["meal_type"]
        if "notes" in changes:
            allowed["notes"] = changes["notes"]
        if not allowed:
            return scan
        return self.repository.update_scan(scan_id, allowed)

    def delete_scan(self, user_id: UUID, scan_id: UUID) -> None:
        """Delete a scan owned by the user."""
        self.get_scan(user_id, scan_id)
        self.repository.delete_scan(scan_id)


def parse_food_line(item: dict[str, object]) -> ResolvedFoodLine:
    """Validate a client food payload into a resolved line."""
    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Each food needs a name")

    raw_quantity = item.get("quantity")
    if raw_quantity is None:
        quantity = DEFAULT_QUANTITY_G
    else:
        quantity = to_float(raw_quantity)
        if quantity is None or quantity <= 0:
            raise ValidationError(f"Invalid quantity for {name}")

    values: dict[str, float] = {}
    for field in ("calories", "carbs", "protein", "fat"):
        value = to_float(item.get(field))
        if value is None or value < 0:
            raise ValidationError(f"Invalid {field} for {name}")
        values[field] = value

    try:
        source = FoodSource(str(item.get("source") or FoodSource.NATIONAL_DB))
    except ValueError as exc:
        raise ValidationError(f"Invalid source for {name}") from exc

    source_id = item.get("source_id")
    brand = item.get("brand")
    food = CanonicalFood(
        external_id=str(source_id) if source_id is not None else "",
        name=name.strip(),
        source=source,
        macros=MacroProfile(
            calories=values["calories"],
            protein_g=values["protein"],
            fat_g=values["fat"],
            carbs_g=values["carbs"],
        ),
        brand=brand if isinstance(brand, str) else None,
    )
    return ResolvedFoodLine(food=food, quantity_g=quantity)


def materialize_line(line: ResolvedFoodLine) -> ScanFoodLine:
    """Snapshot a resolved line with its quantity-scaled nutrients."""
    factor = line.quantity_g / 100
    base = line.food.macros
    return ScanFoodLine(
        name=line.food.name,
        quantity_g=line.quantity_g,
        source=line.food.source,
        source_id=line.food.external_id or None,
        brand=line.food.brand,
        per_100g=base,
        portion=MacroProfile(
            calories=base.calories * factor,
            protein_g=base.protein_g * factor,
            fat_g=base.fat_g * factor,
            carbs_g=base.carbs_g * factor,
        ),
    )


def sum_totals(lines: list[ScanFoodLine]) -> MacroProfile:
    """Sum the portion nutrients of every line."""
    total = ZERO_MACROS
    for line in lines:
        total = MacroProfile(
            calories=total.calories + line.portion.calories,
            protein_g=total.protein_g + line.portion.protein_g,
            fat_g=total.fat_g + line.portion.fat_g,
            carbs_g=total.carbs_g + line.portion.carbs_g,
        )
    return total
