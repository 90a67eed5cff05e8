"""camelCase JSON views of domain objects for the mobile client."""

from scanmycarbs.domain.manual_foods import ManualFood
from scanmycarbs.domain.models import UserRecord
from scanmycarbs.domain.nutrition import CanonicalFood, MacroProfile
from scanmycarbs.domain.scans import ScanFoodLine, ScanPage, ScanRecord
from scanmycarbs.domain.stats import DailyStats, MonthlyStats, WeeklyStats
from scanmycarbs.domain.vision import ImageAnalysis


def envelope(
    data: dict[str, object] | None = None, message: str | None = None
) -> dict[str, object]:
    """Wrap a payload in the success envelope."""
    body: dict[str, object] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def macros(profile: MacroProfile) -> dict[str, float]:
    return {
        "calories": profile.calories,
        "carbs": profile.carbs_g,
        "protein": profile.protein_g,
        "fat": profile.fat_g,
    }


def totals(profile: MacroProfile) -> dict[str, float]:
    return {
        "totalCalories": profile.calories,
        "totalCarbs": profile.carbs_g,
        "totalProtein": profile.protein_g,
        "totalFat": profile.fat_g,
    }


def food(item: CanonicalFood) -> dict[str, object]:
    return {
        "id": item.external_id,
        "name": item.name,
        "brand": item.brand,
        "barcode": item.barcode,
        "source": item.source.value,
        **macros(item.macros),
    }


def manual_food(item: ManualFood) -> dict[str, object]:
    return {
        "id": str(item.id),
        "name": item.name,
        "brand": item.brand,
        "category": item.category,
        "barcode": item.barcode,
        "source": "manual",
        "createdAt": item.created_at.isoformat() if item.created_at else None,
        **macros(item.macros),
    }


def scan_food(line: ScanFoodLine) -> dict[str, object]:
    return {
        "name": line.name,
        "brand": line.brand,
        "quantity": line.quantity_g,
        "source": line.source.value,
        "sourceId": line.source_id,
        **macros(line.per_100g),
        "portion": macros(line.portion),
    }


def scan(record: ScanRecord) -> dict[str, object]:
    return {
        "id": str(record.id),
        "userId": str(record.user_id),
        "scannedAt": record.scanned_at.isoformat(),
        "mealType": record.meal_type,
        "notes": record.notes,
        "imageUrl": record.image_url,
        **totals(record.totals),
        "foods": [scan_food(line) for line in record.foods],
    }


def scan_page(page: ScanPage) -> dict[str, object]:
    return {
        "scans": [scan(record) for record in page.scans],
        "pagination": {
            "page": page.page,
            "limit": page.limit,
            "total": page.total,
            "totalPages": page.total_pages,
        },
    }


def daily_stats(stats: DailyStats) -> dict[str, object]:
    return {
        "date": stats.day.isoformat(),
        "stats": {"totalScans": stats.total_scans, **totals(stats.totals)},
    }


def weekly_stats(stats: WeeklyStats) -> dict[str, object]:
    return {
        "startDate": stats.start.isoformat(),
        "endDate": stats.end.isoformat(),
        "totalScans": stats.total_scans,
        **totals(stats.totals),
        "dailyStats": [
            {
                "date": day.day.isoformat(),
                "scans": day.total_scans,
                **macros(day.totals),
            }
            for day in stats.days
        ],
    }


def monthly_stats(stats: MonthlyStats) -> dict[str, object]:
    return {
        "stats": {
            "year": stats.year,
            "month": stats.month,
            "totalScans": stats.total_scans,
            "averageCalories": stats.average_calories,
            "averageCarbs": stats.average_carbs_g,
            "averageProtein": stats.average_protein_g,
            "averageFat": stats.average_fat_g,
            **totals(stats.totals),
        }
    }


def image_analysis(result: ImageAnalysis) -> dict[str, object]:
    return {
        "foods": [
            {
                "name": item.name,
                "quantity": item.quantity_g,
                "carbs": item.carbs_g,
                "calories": item.calories,
            }
            for item in result.foods
        ],
        "totalCarbs": result.total_carbs_g,
        "totalCalories": result.total_calories,
    }


def user(record: UserRecord) -> dict[str, object]:
    return {
        "id": str(record.id),
        "email": record.email,
        "name": record.name,
        "language": record.language,
        "darkMode": record.dark_mode,
        "dailyGoal": record.daily_goal,
        "createdAt": record.created_at.isoformat() if record.created_at else None,
    }
