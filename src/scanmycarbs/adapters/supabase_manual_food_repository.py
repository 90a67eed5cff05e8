"""Supabase implementation for user-authored foods."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from scanmycarbs.domain.manual_foods import ManualFood
from scanmycarbs.domain.nutrition import MacroProfile
from scanmycarbs.errors import PersistenceError
from scanmycarbs.services.manual_foods import ManualFoodRepository

_TABLE = "manual_foods"


@dataclass
class SupabaseManualFoodRepository(ManualFoodRepository):
    """Supabase-backed repository for manual foods."""

    client: Client

    def create_food(self, user_id: UUID, payload: dict[str, object]) -> ManualFood:
        """Create a food entry and return it."""
        response = (
            self.client.table(_TABLE)
            .insert({"user_id": str(user_id), **payload})
            .execute()
        )
        if not response.data:
            raise PersistenceError("Failed to create manual food")
        return _parse_food(response.data[0])

    def update_food(self, food_id: UUID, payload: dict[str, object]) -> ManualFood:
        """Update a food entry and return it."""
        response = (
            self.client.table(_TABLE).update(payload).eq("id", str(food_id)).execute()
        )
        if not response.data:
            raise PersistenceError("Failed to update manual food")
        return _parse_food(response.data[0])

    def get_food(self, food_id: UUID) -> ManualFood | None:
        """Return a food entry by id, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("id", str(food_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def list_foods(self, user_id: UUID) -> list[ManualFood]:
        """Return a user's foods, newest first."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_food(row) for row in response.data or []]

    def find_by_barcode(self, user_id: UUID, barcode: str) -> ManualFood | None:
        """Return the user's food for an exact barcode."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .eq("barcode", barcode)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def delete_food(self, food_id: UUID) -> None:
        """Delete a food entry."""
        self.client.table(_TABLE).delete().eq("id", str(food_id)).execute()

    def delete_for_user(self, user_id: UUID) -> None:
        """Delete all foods of a user."""
        self.client.table(_TABLE).delete().eq("user_id", str(user_id)).execute()


def _parse_food(row: dict[str, object]) -> ManualFood:
    """Parse a manual food row into a domain model."""
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else None
    )
    return ManualFood(
        id=UUID(row["id"]),
        user_id=UUID(row["user_id"]),
        name=str(row.get("name", "")),
        brand=row.get("brand"),
        category=row.get("category"),
        barcode=row.get("barcode"),
        macros=MacroProfile(
            calories=float(row.get("calories") or 0.0),
            protein_g=float(row.get("protein_g") or 0.0),
            fat_g=float(row.get("fat_g") or 0.0),
            carbs_g=float(row.get("carbs_g") or 0.0),
        ),
        created_at=created_at,
    )
