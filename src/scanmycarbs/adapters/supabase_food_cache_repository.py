"""Supabase repository for the food cache."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from scanmycarbs.domain.nutrition import (
    CachedFoodEntry,
    CanonicalFood,
    FoodSource,
    MacroProfile,
)
from scanmycarbs.services.cache import FoodCacheRepository

_TABLE = "food_cache"


@dataclass
class SupabaseFoodCacheRepository(FoodCacheRepository):
    """Supabase implementation keyed by the (source, external_id) constraint."""

    client: Client

    def upsert(self, food: CanonicalFood, cached_at: datetime) -> None:
        """Insert or overwrite the cached row for the food's key."""
        self.client.table(_TABLE).upsert(
            {
                "source": food.source.value,
                "external_id": food.external_id,
                "name": food.name,
                "brand": food.brand,
                "barcode": food.barcode,
                "calories": food.macros.calories,
                "carbs_g": food.macros.carbs_g,
                "protein_g": food.macros.protein_g,
                "fat_g": food.macros.fat_g,
                "cached_at": cached_at.isoformat(),
            },
            on_conflict="source,external_id",
        ).execute()

    def find_by_external_id(
        self, source: FoodSource, external_id: str
    ) -> CachedFoodEntry | None:
        """Return the cached row for a key."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("source", source.value)
            .eq("external_id", external_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def search_by_name(
        self, query: str, limit: int, source: FoodSource | None = None
    ) -> list[CachedFoodEntry]:
        """Case-insensitive substring search on names."""
        request = (
            self.client.table(_TABLE)
            .select("*")
            .ilike("name", f"%{escape_like(query)}%")
        )
        if source is not None:
            request = request.eq("source", source.value)
        response = request.limit(limit).execute()
        return [_parse_entry(row) for row in response.data or []]


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _parse_entry(row: dict[str, object]) -> CachedFoodEntry:
    cached_raw = row.get("cached_at")
    cached_at = (
        datetime.fromisoformat(cached_raw)
        if isinstance(cached_raw, str) and cached_raw
        else datetime.min.replace(tzinfo=UTC)
    )
    food = CanonicalFood(
        external_id=str(row["external_id"]),
        name=str(row.get("name", "")),
        source=FoodSource(row["source"]),
        macros=MacroProfile(
            calories=float(row.get("calories") or 0.0),
            protein_g=float(row.get("protein_g") or 0.0),
            fat_g=float(row.get("fat_g") or 0.0),
            carbs_g=float(row.get("carbs_g") or 0.0),
        ),
        brand=row.get("brand"),
        barcode=row.get("barcode"),
    )
    return CachedFoodEntry(food=food, cached_at=cached_at)
