"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from scanmycarbs.domain.models import UserRecord
from scanmycarbs.errors import PersistenceError
from scanmycarbs.services.users import UserRepository

_COLUMNS = "id, email, name, language, dark_mode, daily_goal, created_at"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return the user for an id, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_user(response.data[0])
        return None

    def find_by_email(self, email: str) -> UserRecord | None:
        """Return the user for an email, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("email", email)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_user(response.data[0])
        return None

    def create_user(self, user_id: UUID, email: str | None) -> UserRecord:
        """Create a new user row and return it."""
        response = (
            self.client.table("users")
            .insert({"id": str(user_id), "email": email})
            .execute()
        )
        if not response.data:
            raise PersistenceError("Failed to create user in Supabase")
        return _parse_user(response.data[0])

    def update_user(self, user_id: UUID, changes: dict[str, object]) -> UserRecord:
        """Update a user row and return it."""
        response = (
            self.client.table("users").update(changes).eq("id", str(user_id)).execute()
        )
        if not response.data:
            raise PersistenceError("Failed to update user in Supabase")
        return _parse_user(response.data[0])

    def delete_user(self, user_id: UUID) -> None:
        """Delete a user row."""
        self.client.table("users").delete().eq("id", str(user_id)).execute()


def _parse_user(row: dict[str, object]) -> UserRecord:
    created_raw = row.get("created_at")
    daily_goal = row.get("daily_goal")
    return UserRecord(
        id=UUID(row["id"]),
        email=row.get("email"),
        name=row.get("name"),
        language=row.get("language") or "fr",
        dark_mode=bool(row.get("dark_mode", False)),
        daily_goal=float(daily_goal) if daily_goal is not None else None,
        created_at=(
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str) and created_raw
            else None
        ),
    )
