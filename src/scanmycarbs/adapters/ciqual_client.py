"""Ciqual national nutrient database adapter."""

import logging
from dataclasses import dataclass

import httpx

from scanmycarbs.adapters.parsing import (
    extract_number,
    first_text,
    is_invalid_record,
    to_float,
)
from scanmycarbs.domain.nutrition import CanonicalFood, FoodSource, MacroProfile
from scanmycarbs.services.nutrition import NutrientSource

# Ciqual constituent codes; older exports use the short form.
_CONSTITUENT_CODES = {
    "328": "calories",
    "25000": "protein_g",
    "25": "protein_g",
    "31000": "carbs_g",
    "31": "carbs_g",
    "40000": "fat_g",
    "40": "fat_g",
}

_FLAT_KEYS = {
    "calories": ("calories", "energy_kcal", "kcal"),
    "protein_g": ("protein", "proteins", "protein_g"),
    "fat_g": ("fat", "lipids", "fat_g"),
    "carbs_g": ("carbs", "carbohydrates", "carbs_g"),
}

_logger = logging.getLogger(__name__)


@dataclass
class HttpxCiqualClient(NutrientSource):
    """HTTPX-backed Ciqual client returning canonical foods."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 5.0
    health_timeout_seconds: float = 3.0

    source = FoodSource.NATIONAL_DB

    @classmethod
    def create(
        cls,
        base_url: str,
        user_agent: str,
        timeout_seconds: float = 5.0,
        health_timeout_seconds: float = 3.0,
    ) -> "HttpxCiqualClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
            timeout_seconds=timeout_seconds,
            health_timeout_seconds=health_timeout_seconds,
        )

    async def search(self, query: str, limit: int = 10) -> list[CanonicalFood]:
        """Free-text search in the national database."""
        payload = await self._get_json(
            "/search", {"query": query, "limit": limit}, action="search"
        )
        if isinstance(payload, dict):
            payload = payload.get("results") or payload.get("foods")
        if not isinstance(payload, list):
            return []
        foods = []
        for item in payload[:limit]:
            if not isinstance(item, dict):
                continue
            food = parse_food(item)
            if food is not None:
                foods.append(food)
        return foods

    async def get_by_id(self, food_id: str) -> CanonicalFood | None:
        """Fetch a single food by its Ciqual code."""
        payload = await self._get_json(
            f"/food/{food_id}", None, action=f"food:{food_id}"
        )
        if not isinstance(payload, dict):
            return None
        return parse_food(payload)

    async def get_by_barcode(self, code: str) -> CanonicalFood | None:
        """Generic foods carry no barcodes."""
        return None

    async def health_check(self) -> bool:
        """Return True when the search endpoint answers with 200."""
        try:
            response = await self.http_client.get(
                f"{self.base_url}/search",
                params={"query": "test", "limit": 1},
                timeout=self.health_timeout_seconds,
            )
        except httpx.HTTPError:
            return False
        return response.status_code == httpx.codes.OK

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _get_json(
        self, path: str, params: dict[str, object] | None, *, action: str
    ) -> object | None:
        try:
            response = await self.http_client.get(
                f"{self.base_url}{path}",
                params=params,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Ciqual %s failed: %s", action, exc)
            return None


def parse_food(item: dict[str, object]) -> CanonicalFood | None:
    """Normalize a Ciqual record, dropping unusable ones."""
    food_id = first_text(item, ("alim_code", "id", "code"))
    name = first_text(item, ("alim_nom_fr", "alim_nom_eng", "name"))
    values = {field: extract_number(item, keys) for field, keys in _FLAT_KEYS.items()}

    constituents = item.get("constituents") or item.get("nutrients") or []
    if isinstance(constituents, list):
        for constituent in constituents:
            if not isinstance(constituent, dict):
                continue
            code = first_text(constituent, ("const_code", "code"))
            field = _CONSTITUENT_CODES.get(code or "")
            if field is None:
                continue
            amount = to_float(constituent.get("teneur"))
            if amount is None:
                amount = to_float(constituent.get("value"))
            values[field] = max(amount or 0.0, 0.0)

    macros = MacroProfile(**values)
    if is_invalid_record(name, macros) or food_id is None:
        return None
    return CanonicalFood(
        external_id=food_id,
        name=name or food_id,
        source=FoodSource.NATIONAL_DB,
        macros=macros,
    )
