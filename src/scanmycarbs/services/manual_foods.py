"""Services for user-authored foods."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from scanmycarbs.adapters.parsing import to_float
from scanmycarbs.domain.manual_foods import ManualFood
from scanmycarbs.errors import NotFoundError, ValidationError

_MACRO_FIELDS = ("calories", "carbs_g", "protein_g", "fat_g")
_TEXT_FIELDS = ("name", "brand", "category", "barcode")


class ManualFoodRepository(Protocol):
    """Persistence interface for manual foods."""

    def create_food(self, user_id: UUID, payload: dict[str, object]) -> ManualFood:
        """Create a manual food and return it."""

    def update_food(self, food_id: UUID, payload: dict[str, object]) -> ManualFood:
        """Apply a partial update and return the food."""

    def get_food(self, food_id: UUID) -> ManualFood | None:
        """Return a manual food by id, if present."""

    def list_foods(self, user_id: UUID) -> list[ManualFood]:
        """Return a user's foods, newest first."""

    def find_by_barcode(self, user_id: UUID, barcode: str) -> ManualFood | None:
        """Return the user's food with this exact barcode, if any."""

    def delete_food(self, food_id: UUID) -> None:
        """Delete a manual food."""

    def delete_for_user(self, user_id: UUID) -> None:
        """Delete every manual food owned by a user."""


@dataclass
class ManualFoodService:
    """Application service for manual food operations."""

    repository: ManualFoodRepository

    def add(self, user_id: UUID, payload: dict[str, object]) -> ManualFood:
        """Create a manual food; name and all four macros are required."""
        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Incomplete nutrition information")
        if any(payload.get(key) is None for key in _MACRO_FIELDS):
            raise ValidationError("Incomplete nutrition information")
        return self.repository.create_food(user_id, _clean_payload(payload))

    def list_for_user(self, user_id: UUID) -> list[ManualFood]:
        """Return the user's manual foods."""
        return self.repository.list_foods(user_id)

    def find_owned(self, user_id: UUID, food_id: UUID) -> ManualFood | None:
        """Return a food only when the user owns it."""
        food = self.repository.get_food(food_id)
        if food is None or food.user_id != user_id:
            return None
        return food

    def get_owned(self, user_id: UUID, food_id: UUID) -> ManualFood:
        """Return a food the user owns or raise NotFoundError."""
        food = self.find_owned(user_id, food_id)
        if food is None:
            raise NotFoundError("Food not found")
        return food

    def update(
        self, user_id: UUID, food_id: UUID, payload: dict[str, object]
    ) -> ManualFood:
        """Partially update one of the user's foods."""
        self.get_owned(user_id, food_id)
        changes = _clean_payload(
            {key: value for key, value in payload.items() if value is not None}
        )
        if not changes:
            return self.get_owned(user_id, food_id)
        return self.repository.update_food(food_id, changes)

    def delete(self, user_id: UUID, food_id: UUID) -> None:
        """Delete one of the user's foods."""
        self.get_owned(user_id, food_id)
        self.repository.delete_food(food_id)

    def find_by_barcode(self, user_id: UUID, barcode: str) -> ManualFood | None:
        """Return the user's manual food for a barcode."""
        return self.repository.find_by_barcode(user_id, barcode)


def _clean_payload(payload: dict[str, object]) -> dict[str, object]:
    cleaned: dict[str, object] = {}
    for key in _TEXT_FIELDS:
        if key in payload:
            value = payload[key]
            cleaned[key] = value.strip() if isinstance(value, str) else value
    if "name" in cleaned and not cleaned["name"]:
        raise ValidationError("Food name cannot be empty")
    for key in _MACRO_FIELDS:
        if key not in payload:
            continue
        number = to_float(payload[key])
        if number is None or number < 0:
            raise ValidationError(f"Invalid value for {key}")
        cleaned[key] = number
    return cleaned
