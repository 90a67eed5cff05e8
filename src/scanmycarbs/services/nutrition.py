"""Food resolution across the local cache and the nutrition providers."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from scanmycarbs.domain.manual_foods import manual_to_canonical
from scanmycarbs.domain.nutrition import CanonicalFood, FoodSource, MacroProfile
from scanmycarbs.errors import ValidationError
from scanmycarbs.services.cache import FoodCache
from scanmycarbs.services.manual_foods import ManualFoodService

_logger = logging.getLogger(__name__)


class NutrientSource(Protocol):
    """Interface for a nutrition provider adapter.

    Implementations never raise on transport failures: searches degrade to an
    empty list and single lookups to None.
    """

    source: FoodSource

    async def search(self, query: str, limit: int = 10) -> list[CanonicalFood]:
        """Free-text search returning canonical foods."""

    async def get_by_id(self, food_id: str) -> CanonicalFood | None:
        """Fetch a food by provider id."""

    async def get_by_barcode(self, code: str) -> CanonicalFood | None:
        """Fetch a food by barcode."""

    async def health_check(self) -> bool:
        """Return True when the provider is reachable."""


class PackagedProductSource(NutrientSource, Protocol):
    """Packaged-product provider that also supports tag-filtered search."""

    async def search_advanced(  # noqa: PLR0913
        self,
        query: str,
        *,
        brands: str | None = None,
        categories: str | None = None,
        labels: str | None = None,
        limit: int = 20,
    ) -> list[CanonicalFood]:
        """Search restricted by brand, category and label tags."""


def _common(external_id: str, name: str, *macros: float) -> CanonicalFood:
    calories, carbs_g, protein_g, fat_g = macros
    return CanonicalFood(
        external_id=external_id,
        name=name,
        source=FoodSource.NATIONAL_DB,
        macros=MacroProfile(
            calories=calories, protein_g=protein_g, fat_g=fat_g, carbs_g=carbs_g
        ),
    )


# Average values per 100 g: calories, carbs, protein, fat.
COMMON_FOODS: tuple[CanonicalFood, ...] = (
    _common("pain_blanc", "White bread", 265, 49, 9, 3.5),
    _common("riz_blanc", "White rice, cooked", 130, 28, 2.7, 0.3),
    _common("pates", "Pasta, cooked", 131, 25, 5, 1),
    _common("pomme", "Apple", 52, 14, 0.3, 0.2),
    _common("banane", "Banana", 89, 23, 1.1, 0.3),
    _common("poulet", "Chicken breast", 165, 0, 31, 3.6),
    _common("boeuf", "Beef steak", 250, 0, 26, 15),
    _common("lait", "Semi-skimmed milk", 46, 4.8, 3.2, 1.5),
    _common("yaourt", "Plain yogurt", 61, 4, 3.5, 3.3),
    _common("fromage", "Emmental cheese", 382, 1.6, 28, 29),
)


@dataclass
class FoodResolver:
    """Cache-first food lookup across the national and packaged providers."""

    national_db: NutrientSource
    packaged_products: PackagedProductSource
    cache: FoodCache
    manual_foods: ManualFoodService
    max_limit: int = 50

    async def search(  # noqa: PLR0913
        self,
        query: str,
        limit: int = 10,
        *,
        brands: str | None = None,
        categories: str | None = None,
        labels: str | None = None,
    ) -> list[CanonicalFood]:
        """Search both providers; national results come first.

        Brand, category and label filters only narrow the packaged-product
        results. Cross-source duplicates are kept as-is.
        """
        cleaned = query.strip() if query else ""
        if not cleaned:
            raise ValidationError("Search query is required")
        if limit < 1:
            raise ValidationError("Limit must be a positive integer")
        limit = min(limit, self.max_limit)

        national, packaged = await asyncio.gather(
            self._search_national(cleaned, limit),
            self._search_packaged(cleaned, limit, brands, categories, labels),
        )
        _logger.debug(
            "Food search %r: national=%s packaged=%s",
            cleaned,
            len(national),
            len(packaged),
        )
        return [*national, *packaged][:limit]

    async def get_details(
        self, food_id: str, source: str, user_id: UUID | None = None
    ) -> CanonicalFood | None:
        """Route a detail lookup to the provider named by ``source``."""
        try:
            resolved_source = FoodSource(source)
        except ValueError as exc:
            raise ValidationError(f"Invalid source: {source}") from exc

        if resolved_source is FoodSource.NATIONAL_DB:
            cached = self.cache.get(FoodSource.NATIONAL_DB, food_id)
            if cached is not None:
                return cached
            food = await self.national_db.get_by_id(food_id)
            if food is not None:
                self.cache.store(food)
            return food
        if resolved_source is FoodSource.PACKAGED_PRODUCT:
            return await self.packaged_products.get_by_id(food_id)
        return self._get_manual(food_id, user_id)

    async def resolve_barcode(
        self, barcode: str, user_id: UUID | None
    ) -> CanonicalFood | None:
        """Resolve a barcode; the caller's manual foods take precedence."""
        cleaned = barcode.strip() if barcode else ""
        if not cleaned:
            raise ValidationError("Barcode is required")
        if user_id is not None:
            manual = self.manual_foods.find_by_barcode(user_id, cleaned)
            if manual is not None:
                return manual_to_canonical(manual)
        return await self.packaged_products.get_by_barcode(cleaned)

    def common_foods(self) -> list[CanonicalFood]:
        """Everyday foods with average values for quick entry."""
        return list(COMMON_FOODS)

    async def provider_health(self) -> dict[str, bool]:
        """Check both providers concurrently."""
        national_ok, packaged_ok = await asyncio.gather(
            self.national_db.health_check(),
            self.packaged_products.health_check(),
        )
        return {
            FoodSource.NATIONAL_DB.value: national_ok,
            FoodSource.PACKAGED_PRODUCT.value: packaged_ok,
        }

    async def _search_national(self, query: str, limit: int) -> list[CanonicalFood]:
        cached = self.cache.search(query, limit, source=FoodSource.NATIONAL_DB)
        if cached:
            return cached
        foods = await self.national_db.search(query, limit)
        for food in foods:
            self.cache.store(food)
        return foods

    async def _search_packaged(  # noqa: PLR0913
        self,
        query: str,
        limit: int,
        brands: str | None,
        categories: str | None,
        labels: str | None,
    ) -> list[CanonicalFood]:
        if not (brands or categories or labels):
            return await self.packaged_products.search(query, limit)
        return await self.packaged_products.search_advanced(
            query, brands=brands, categories=categories, labels=labels, limit=limit
        )

    def _get_manual(self, food_id: str, user_id: UUID | None) -> CanonicalFood | None:
        if user_id is None:
            return None
        try:
            manual_id = UUID(food_id)
        except ValueError:
            return None
        food = self.manual_foods.find_owned(user_id, manual_id)
        return manual_to_canonical(food) if food else None
