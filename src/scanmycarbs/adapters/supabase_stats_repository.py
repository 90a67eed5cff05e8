"""Supabase repository for scan statistics."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from scanmycarbs.domain.nutrition import MacroProfile
from scanmycarbs.domain.stats import ScanTotalsRow
from scanmycarbs.services.stats import StatsRepository


@dataclass
class SupabaseStatsRepository(StatsRepository):
    """Supabase implementation for stats queries."""

    client: Client

    def list_scan_totals(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[ScanTotalsRow]:
        """Return scan totals with start <= scanned_at <= end."""
        response = (
            self.client.table("scans")
            .select(
                "id, scanned_at, total_calories, total_carbs_g, total_protein_g, "
                "total_fat_g"
            )
            .eq("user_id", str(user_id))
            .gte("scanned_at", start.isoformat())
            .lte("scanned_at", end.isoformat())
            .order("scanned_at", desc=False)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> ScanTotalsRow:
    scanned_raw = row.get("scanned_at")
    scanned_at = (
        datetime.fromisoformat(scanned_raw)
        if isinstance(scanned_raw, str) and scanned_raw
        else datetime.min.replace(tzinfo=UTC)
    )
    return ScanTotalsRow(
        scan_id=UUID(row["id"]),
        scanned_at=scanned_at,
        totals=MacroProfile(
            calories=float(row.get("total_calories") or 0.0),
            protein_g=float(row.get("total_protein_g") or 0.0),
            fat_g=float(row.get("total_fat_g") or 0.0),
            carbs_g=float(row.get("total_carbs_g") or 0.0),
        ),
    )
