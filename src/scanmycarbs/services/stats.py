"""Statistics over a user's scans by local day, week and month."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from scanmycarbs.domain.nutrition import ZERO_MACROS, MacroProfile
from scanmycarbs.domain.stats import (
    DailyStats,
    MonthlyStats,
    ScanTotalsRow,
    WeeklyStats,
)
from scanmycarbs.errors import ValidationError

DECEMBER = 12
_LAST_MOMENT = timedelta(milliseconds=1)


class StatsRepository(Protocol):
    """Persistence interface for scan statistics."""

    def list_scan_totals(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[ScanTotalsRow]:
        """Return scans with start <= scanned_at <= end."""


@dataclass
class StatsService:
    """Service for computing user stats in a local timezone."""

    repository: StatsRepository
    default_timezone: str = "UTC"

    def get_daily(
        self,
        user_id: UUID,
        day: date | None = None,
        timezone_name: str | None = None,
    ) -> DailyStats:
        """Totals for a local day, defaulting to today."""
        tz = self._zone(timezone_name)
        target = day or datetime.now(tz=tz).date()
        _check_year(target.year)
        start = _local_midnight(target, tz)
        rows = self._fetch(user_id, start, start + timedelta(days=1))
        return _aggregate_day(target, rows, tz)

    def get_weekly(
        self,
        user_id: UUID,
        anchor: date | None = None,
        timezone_name: str | None = None,
    ) -> WeeklyStats:
        """Sunday-start week containing ``anchor`` with a per-day breakdown."""
        tz = self._zone(timezone_name)
        target = anchor or datetime.now(tz=tz).date()
        _check_year(target.year)
        first_day = target - timedelta(days=(target.weekday() + 1) % 7)
        start = _local_midnight(first_day, tz)
        end = _local_midnight(first_day + timedelta(days=7), tz)
        rows = self._fetch(user_id, start, end)
        days = [
            _aggregate_day(first_day + timedelta(days=offset), rows, tz)
            for offset in range(7)
        ]
        return WeeklyStats(
            start=first_day,
            end=first_day + timedelta(days=6),
            total_scans=sum(day.total_scans for day in days),
            totals=_sum_macros(day.totals for day in days),
            days=days,
        )

    def get_monthly(
        self,
        user_id: UUID,
        year: int | None = None,
        month: int | None = None,
        timezone_name: str | None = None,
    ) -> MonthlyStats:
        """Calendar month totals with averages per scan."""
        tz = self._zone(timezone_name)
        now = datetime.now(tz=tz)
        target_year = now.year if year is None else year
        target_month = now.month if month is None else month
        _check_year(target_year)
        if not 1 <= target_month <= DECEMBER:
            raise ValidationError("Month must be between 1 and 12")
        first_day = date(target_year, target_month, 1)
        if target_month == DECEMBER:
            next_first = date(target_year + 1, 1, 1)
        else:
            next_first = date(target_year, target_month + 1, 1)
        rows = self._fetch(
            user_id, _local_midnight(first_day, tz), _local_midnight(next_first, tz)
        )
        totals = _sum_macros(row.totals for row in rows)
        count = len(rows)
        return MonthlyStats(
            year=target_year,
            month=target_month,
            total_scans=count,
            totals=totals,
            average_calories=totals.calories / count if count else 0.0,
            average_carbs_g=totals.carbs_g / count if count else 0.0,
            average_protein_g=totals.protein_g / count if count else 0.0,
            average_fat_g=totals.fat_g / count if count else 0.0,
        )

    def _fetch(
        self, user_id: UUID, start: datetime, end_exclusive: datetime
    ) -> list[ScanTotalsRow]:
        # The window is closed: its last instant is one millisecond before
        # the next period starts.
        return self.repository.list_scan_totals(
            user_id,
            start.astimezone(UTC),
            (end_exclusive - _LAST_MOMENT).astimezone(UTC),
        )

    def _zone(self, timezone_name: str | None) -> ZoneInfo:
        name = timezone_name or self.default_timezone
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValidationError(f"Unknown timezone: {name}") from exc


def _check_year(year: int) -> None:
    # Windows are shifted by up to a week and converted to UTC, so the first
    # and last representable years cannot be queried.
    if not date.min.year < year < date.max.year:
        raise ValidationError("Year is out of range")


def _local_midnight(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def _aggregate_day(day: date, rows: list[ScanTotalsRow], tz: ZoneInfo) -> DailyStats:
    matching = [row for row in rows if row.scanned_at.astimezone(tz).date() == day]
    return DailyStats(
        day=day,
        total_scans=len(matching),
        totals=_sum_macros(row.totals for row in matching),
    )


def _sum_macros(items: Iterable[MacroProfile]) -> MacroProfile:
    total = ZERO_MACROS
    for item in items:
        total = MacroProfile(
            calories=total.calories + item.calories,
            protein_g=total.protein_g + item.protein_g,
            fat_g=total.fat_g + item.fat_g,
            carbs_g=total.carbs_g + item.carbs_g,
        )
    return total
