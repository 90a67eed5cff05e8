"""Scan history and statistics endpoints."""

from datetime import UTC, date, datetime, time
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from scanmycarbs.api import serializers
from scanmycarbs.api.deps import current_user, get_container
from scanmycarbs.api.schemas import CreateScanRequest, UpdateScanRequest
from scanmycarbs.containers import AppContainer
from scanmycarbs.domain.models import UserRecord
from scanmycarbs.errors import ValidationError

router = APIRouter(prefix="/api/scan", tags=["scan"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_scan(
    body: CreateScanRequest,
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Record a scan; totals are computed from the food lines."""
    foods = (
        [item.model_dump(exclude_none=True) for item in body.foods]
        if body.foods
        else None
    )
    scan = container.scan_service.create_scan(
        user.id,
        foods,
        meal_type=body.meal_type,
        notes=body.notes,
        image_url=body.image_url,
    )
    return serializers.envelope({"scan": serializers.scan(scan)}, message="Scan saved")


@router.get("")
async def list_scans(  # noqa: PLR0913
    page: int = 1,
    limit: int = 20,
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Return the caller's scans, newest first."""
    result = container.scan_service.list_scans(
        user.id,
        page=page,
        limit=limit,
        start=_parse_bound(start_date, end_of_day=False),
        end=_parse_bound(end_date, end_of_day=True),
    )
    return serializers.envelope(serializers.scan_page(result))


@router.get("/stats/daily")
async def daily_stats(
    day: date | None = Query(default=None, alias="date"),
    timezone: str | None = None,
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    stats = container.stats_service.get_daily(user.id, day, timezone)
    return serializers.envelope(serializers.daily_stats(stats))


@router.get("/stats/weekly")
async def weekly_stats(
    start_date: date | None = Query(default=None, alias="startDate"),
    timezone: str | None = None,
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    stats = container.stats_service.get_weekly(user.id, start_date, timezone)
    return serializers.envelope(serializers.weekly_stats(stats))


@router.get("/stats/monthly")
async def monthly_stats(  # noqa: PLR0913
    year: int | None = None,
    month: int | None = None,
    timezone: str | None = None,
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    stats = container.stats_service.get_monthly(user.id, year, month, timezone)
    return serializers.envelope(serializers.monthly_stats(stats))


@router.get("/{scan_id}")
async def scan_details(
    scan_id: UUID,
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    scan = container.scan_service.get_scan(user.id, scan_id)
    return serializers.envelope({"scan": serializers.scan(scan)})


@router.patch("/{scan_id}")
async def update_scan(
    scan_id: UUID,
    body: UpdateScanRequest,
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Change the meal type or notes of a scan."""
    changes = {
        field: getattr(body, field)
        for field in ("meal_type", "notes")
        if field in body.model_fields_set
    }
    scan = container.scan_service.update_scan(user.id, scan_id, changes)
    return serializers.envelope(
        {"scan": serializers.scan(scan)}, message="Scan updated"
    )


@router.delete("/{scan_id}")
async def delete_scan(
    scan_id: UUID,
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    container.scan_service.delete_scan(user.id, scan_id)
    return serializers.envelope(message="Scan deleted")


def _parse_bound(raw: str | None, *, end_of_day: bool) -> datetime | None:
    """Parse a date or datetime filter; a bare end date covers the whole day."""
    if not raw:
        return None
    try:
        if len(raw) == len("YYYY-MM-DD"):
            day = date.fromisoformat(raw)
            return datetime.combine(day, time.max if end_of_day else time.min, UTC)
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {raw}") from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
