"""Local cache of resolved canonical foods."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from scanmycarbs.domain.nutrition import CachedFoodEntry, CanonicalFood, FoodSource

_logger = logging.getLogger(__name__)


class FoodCacheRepository(Protocol):
    """Persistence interface for cached foods keyed by (source, external_id)."""

    def upsert(self, food: CanonicalFood, cached_at: datetime) -> None:
        """Insert or overwrite the entry for the food's key."""

    def find_by_external_id(
        self, source: FoodSource, external_id: str
    ) -> CachedFoodEntry | None:
        """Return the cached entry for a key, if present."""

    def search_by_name(
        self, query: str, limit: int, source: FoodSource | None = None
    ) -> list[CachedFoodEntry]:
        """Case-insensitive substring search on food names."""


@dataclass
class InMemoryFoodCacheRepository(FoodCacheRepository):
    """Process-local cache repository for development and tests."""

    _entries: dict[tuple[FoodSource, str], CachedFoodEntry] = field(
        default_factory=dict
    )

    def upsert(self, food: CanonicalFood, cached_at: datetime) -> None:
        """Overwrite the entry for the food's key."""
        key = (food.source, food.external_id)
        self._entries[key] = CachedFoodEntry(food=food, cached_at=cached_at)

    def find_by_external_id(
        self, source: FoodSource, external_id: str
    ) -> CachedFoodEntry | None:
        """Return the cached entry for a key."""
        return self._entries.get((source, external_id))

    def search_by_name(
        self, query: str, limit: int, source: FoodSource | None = None
    ) -> list[CachedFoodEntry]:
        """Substring match on lower-cased names."""
        needle = query.lower()
        matches = [
            entry
            for (entry_source, _), entry in self._entries.items()
            if (source is None or entry_source == source)
            and needle in entry.food.name.lower()
        ]
        return matches[:limit]

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class FoodCache:
    """Cache facade that never lets a storage failure break a lookup."""

    repository: FoodCacheRepository

    def store(self, food: CanonicalFood) -> None:
        """Upsert a food and refresh its timestamp."""
        try:
            self.repository.upsert(food, cached_at=datetime.now(tz=UTC))
        except Exception:
            _logger.exception(
                "Failed to cache food %s:%s", food.source, food.external_id
            )

    def get(self, source: FoodSource, external_id: str) -> CanonicalFood | None:
        """Return a cached food by key."""
        try:
            entry = self.repository.find_by_external_id(source, external_id)
        except Exception:
            _logger.exception("Cache lookup failed for %s:%s", source, external_id)
            return None
        return entry.food if entry else None

    def search(
        self, query: str, limit: int, source: FoodSource | None = None
    ) -> list[CanonicalFood]:
        """Return cached foods whose name contains the query."""
        try:
            entries = self.repository.search_by_name(query, limit, source=source)
        except Exception:
            _logger.exception("Cache search failed for %r", query)
            return []
        return [entry.food for entry in entries[:limit]]
