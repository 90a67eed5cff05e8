"""Supabase repository for scans and their food lines."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from scanmycarbs.domain.nutrition import FoodSource, MacroProfile
from scanmycarbs.domain.scans import ScanFoodLine, ScanRecord
from scanmycarbs.errors import PersistenceError
from scanmycarbs.services.scans import ScanRepository

_SCAN_COLUMNS = (
    "id, user_id, scanned_at, meal_type, notes, image_url, total_calories, "
    "total_carbs_g, total_protein_g, total_fat_g, scan_foods(*)"
)


@dataclass
class SupabaseScanRepository(ScanRepository):
    """Supabase implementation for scans.

    Creation goes through the ``create_scan_with_foods`` database function so
    the scan row and its lines are written in a single transaction.
    """

    client: Client

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
        """Create the scan and its lines atomically and return the stored scan."""
        response = self.client.rpc(
            "create_scan_with_foods",
            {
                "p_user_id": str(user_id),
                "p_scanned_at": scanned_at.isoformat(),
                "p_meal_type": meal_type,
                "p_notes": notes,
                "p_image_url": image_url,
                "p_totals": _macros_payload(totals),
                "p_foods": [
                    _line_payload(position, line)
                    for position, line in enumerate(foods)
                ],
            },
        ).execute()
        scan_id = _returned_id(response.data)
        if scan_id is None:
            raise PersistenceError("Failed to create scan")
        scan = self.get_scan(scan_id)
        if scan is None:
            raise PersistenceError("Failed to load created scan")
        return scan

    def get_scan(self, scan_id: UUID) -> ScanRecord | None:
        """Return a scan with its lines."""
        response = (
            self.client.table("scans")
            .select(_SCAN_COLUMNS)
            .eq("id", str(scan_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_scan(response.data[0])

    def list_scans(
        self,
        user_id: UUID,
        offset: int,
        limit: int,
        start: datetime | None,
        end: datetime | None,
    ) -> tuple[list[ScanRecord], int]:
        """Return a page of scans, newest first, with the exact total."""
        request = (
            self.client.table("scans")
            .select(_SCAN_COLUMNS, count="exact")
            .eq("user_id", str(user_id))
        )
        if start is not None:
            request = request.gte("scanned_at", start.isoformat())
        if end is not None:
            request = request.lte("scanned_at", end.isoformat())
        response = (
            request.order("scanned_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        scans = [_parse_scan(row) for row in response.data or []]
        total = response.count if response.count is not None else len(scans)
        return scans, total

    def update_scan(self, scan_id: UUID, changes: dict[str, object]) -> ScanRecord:
        """Update meal type or notes and return the scan."""
        response = (
            self.client.table("scans").update(changes).eq("id", str(scan_id)).execute()
        )
        if not response.data:
            raise PersistenceError("Failed to update scan")
        scan = self.get_scan(scan_id)
        if scan is None:
            raise PersistenceError("Failed to load updated scan")
        return scan

    def delete_scan(self, scan_id: UUID) -> None:
        """Delete a scan; lines go with it through the foreign key cascade."""
        self.client.table("scans").delete().eq("id", str(scan_id)).execute()

    def delete_for_user(self, user_id: UUID) -> None:
        """Delete all scans of a user."""
        self.client.table("scans").delete().eq("user_id", str(user_id)).execute()


def _macros_payload(macros: MacroProfile) -> dict[str, float]:
    return {
        "calories": macros.calories,
        "carbs_g": macros.carbs_g,
        "protein_g": macros.protein_g,
        "fat_g": macros.fat_g,
    }


def _line_payload(position: int, line: ScanFoodLine) -> dict[str, object]:
    return {
        "position": position,
        "name": line.name,
        "brand": line.brand,
        "source": line.source.value,
        "source_id": line.source_id,
        "quantity_g": line.quantity_g,
        "calories_per_100g": line.per_100g.calories,
        "carbs_per_100g": line.per_100g.carbs_g,
        "protein_per_100g": line.per_100g.protein_g,
        "fat_per_100g": line.per_100g.fat_g,
        "calories": line.portion.calories,
        "carbs_g": line.portion.carbs_g,
        "protein_g": line.portion.protein_g,
        "fat_g": line.portion.fat_g,
    }


def _returned_id(data: object) -> UUID | None:
    """Read the scan id from an RPC result, scalar or row shaped."""
    if isinstance(data, list):
        data = data[0] if data else None
    if isinstance(data, dict):
        data = data.get("id") or data.get("create_scan_with_foods")
    if not data:
        return None
    return UUID(str(data))


def _parse_scan(row: dict[str, object]) -> ScanRecord:
    scanned_raw = row.get("scanned_at")
    scanned_at = (
        datetime.fromisoformat(scanned_raw)
        if isinstance(scanned_raw, str) and scanned_raw
        else datetime.min.replace(tzinfo=UTC)
    )
    lines = sorted(
        row.get("scan_foods") or [], key=lambda item: item.get("position") or 0
    )
    return ScanRecord(
        id=UUID(row["id"]),
        user_id=UUID(row["user_id"]),
        scanned_at=scanned_at,
        meal_type=row.get("meal_type"),
        notes=row.get("notes"),
        image_url=row.get("image_url"),
        totals=MacroProfile(
            calories=float(row.get("total_calories") or 0.0),
            protein_g=float(row.get("total_protein_g") or 0.0),
            fat_g=float(row.get("total_fat_g") or 0.0),
            carbs_g=float(row.get("total_carbs_g") or 0.0),
        ),
        foods=[_parse_line(item) for item in lines],
    )


def _parse_line(row: dict[str, object]) -> ScanFoodLine:
    return ScanFoodLine(
        name=str(row.get("name", "")),
        quantity_g=float(row.get("quantity_g") or 0.0),
        source=FoodSource(row.get("source") or FoodSource.NATIONAL_DB),
        source_id=row.get("source_id"),
        brand=row.get("brand"),
        per_100g=MacroProfile(
            calories=float(row.get("calories_per_100g") or 0.0),
            protein_g=float(row.get("protein_per_100g") or 0.0),
            fat_g=float(row.get("fat_per_100g") or 0.0),
            carbs_g=float(row.get("carbs_per_100g") or 0.0),
        ),
        portion=MacroProfile(
            calories=float(row.get("calories") or 0.0),
            protein_g=float(row.get("protein_g") or 0.0),
            fat_g=float(row.get("fat_g") or 0.0),
            carbs_g=float(row.get("carbs_g") or 0.0),
        ),
    )
