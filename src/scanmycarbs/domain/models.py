"""Domain models for user accounts."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Represents a user profile stored in the database."""

    id: UUID
    email: str | None
    name: str | None = None
    language: str = "fr"
    dark_mode: bool = False
    daily_goal: float | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity proven by a verified access token."""

    id: UUID
    email: str | None
