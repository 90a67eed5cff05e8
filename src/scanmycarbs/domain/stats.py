"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from scanmycarbs.domain.nutrition import MacroProfile


@dataclass(frozen=True)
class ScanTotalsRow:
    """Totals of a single scan as needed for aggregation."""

    scan_id: UUID
    scanned_at: datetime
    totals: MacroProfile


@dataclass(frozen=True)
class DailyStats:
    """Totals for a single local day."""

    day: date
    total_scans: int
    totals: MacroProfile


@dataclass(frozen=True)
class WeeklyStats:
    """Sunday-start week with a per-day breakdown."""

    start: date
    end: date
    total_scans: int
    totals: MacroProfile
    days: list[DailyStats]


@dataclass(frozen=True)
class MonthlyStats:
    """Calendar month totals with per-scan averages."""

    year: int
    month: int
    total_scans: int
    totals: MacroProfile
    average_calories: float
    average_carbs_g: float
    average_protein_g: float
    average_fat_g: float
