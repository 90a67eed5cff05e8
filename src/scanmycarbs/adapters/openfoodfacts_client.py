"""OpenFoodFacts packaged-product adapter."""

import logging
from dataclasses import dataclass

import httpx

from scanmycarbs.adapters.parsing import (
    extract_number,
    first_text,
    is_invalid_record,
)
from scanmycarbs.domain.nutrition import CanonicalFood, FoodSource, MacroProfile
from scanmycarbs.services.nutrition import PackagedProductSource

_FIELDS = "code,product_name,product_name_fr,product_name_en,brands,nutriments"
_KJ_PER_KCAL = 4.184
_UNNAMED = "Unnamed product"

_logger = logging.getLogger(__name__)


@dataclass
class HttpxOpenFoodFactsClient(PackagedProductSource):
    """HTTPX-backed OpenFoodFacts client returning canonical foods."""

    base_url: str
    http_client: httpx.AsyncClient
    country: str | None = None
    timeout_seconds: float = 5.0
    health_timeout_seconds: float = 3.0

    source = FoodSource.PACKAGED_PRODUCT

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        base_url: str,
        user_agent: str,
        country: str | None = None,
        timeout_seconds: float = 5.0,
        health_timeout_seconds: float = 3.0,
    ) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
            country=country,
            timeout_seconds=timeout_seconds,
            health_timeout_seconds=health_timeout_seconds,
        )

    async def search(self, query: str, limit: int = 10) -> list[CanonicalFood]:
        """Free-text product search."""
        params: dict[str, object] = {
            "search_terms": query,
            "page_size": limit,
            "fields": _FIELDS,
            "json": 1,
        }
        if self.country:
            params["countries_tags_en"] = self.country
        payload = await self._get_json("/search", params, action="search")
        if payload is None:
            return []
        return _parse_products(payload.get("products"))[:limit]

    async def search_advanced(
        self,
        query: str,
        *,
        brands: str | None = None,
        categories: str | None = None,
        labels: str | None = None,
        limit: int = 20,
    ) -> list[CanonicalFood]:
        """Search with optional brand, category and label tag filters."""
        params: dict[str, object] = {
            "search_terms": query,
            "page_size": limit,
            "fields": _FIELDS,
            "json": 1,
        }
        if brands:
            params["brands_tags"] = brands
        if categories:
            params["categories_tags"] = categories
        if labels:
            params["labels_tags"] = labels
        payload = await self._get_json("/search", params, action="search_advanced")
        if payload is None:
            return []
        return _parse_products(payload.get("products"))[:limit]

    async def get_by_barcode(self, code: str) -> CanonicalFood | None:
        """Fetch a product by barcode."""
        payload = await self._get_json(
            f"/product/{code}", {"fields": _FIELDS}, action=f"product:{code}"
        )
        if payload is None or payload.get("status") == 0:
            return None
        product = payload.get("product")
        if not isinstance(product, dict):
            return None
        return parse_product(product)

    async def get_by_id(self, food_id: str) -> CanonicalFood | None:
        """Product ids are barcodes for this provider."""
        return await self.get_by_barcode(food_id)

    async def health_check(self) -> bool:
        """Return True when the search endpoint answers with 200."""
        try:
            response = await self.http_client.get(
                f"{self.base_url}/search",
                params={"search_terms": "test", "page_size": 1},
                timeout=self.health_timeout_seconds,
            )
        except httpx.HTTPError:
            return False
        return response.status_code == httpx.codes.OK

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _get_json(
        self, path: str, params: dict[str, object], *, action: str
    ) -> dict[str, object] | None:
        try:
            response = await self.http_client.get(
                f"{self.base_url}{path}",
                params=params,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("OpenFoodFacts %s failed: %s", action, exc)
            return None
        if not isinstance(payload, dict):
            _logger.warning("OpenFoodFacts %s returned a non-object payload", action)
            return None
        return payload


def parse_product(product: dict[str, object]) -> CanonicalFood | None:
    """Normalize an OpenFoodFacts product, dropping unusable records."""
    code = first_text(product, ("code", "_id", "id"))
    name = first_text(product, ("product_name", "product_name_fr", "product_name_en"))
    nutriments = product.get("nutriments")
    if not isinstance(nutriments, dict):
        nutriments = {}

    calories = extract_number(nutriments, ("energy-kcal_100g", "energy-kcal"))
    if calories == 0:
        kilojoules = extract_number(
            nutriments, ("energy-kj_100g", "energy_100g", "energy-kj")
        )
        calories = round(kilojoules / _KJ_PER_KCAL, 1)
    macros = MacroProfile(
        calories=calories,
        protein_g=extract_number(nutriments, ("proteins_100g", "proteins")),
        fat_g=extract_number(nutriments, ("fat_100g", "fat")),
        carbs_g=extract_number(nutriments, ("carbohydrates_100g", "carbohydrates")),
    )
    if is_invalid_record(name, macros) or code is None:
        return None
    return CanonicalFood(
        external_id=code,
        name=name or _UNNAMED,
        source=FoodSource.PACKAGED_PRODUCT,
        macros=macros,
        brand=first_text(product, ("brands",)),
        barcode=code,
    )


def _parse_products(products: object) -> list[CanonicalFood]:
    if not isinstance(products, list):
        return []
    foods = []
    for product in products:
        if not isinstance(product, dict):
            continue
        food = parse_product(product)
        if food is not None:
            foods.append(food)
    return foods
