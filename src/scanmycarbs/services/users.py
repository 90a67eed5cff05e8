"""User account business logic."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from scanmycarbs.domain.models import UserRecord
from scanmycarbs.errors import ConflictError, NotFoundError, ValidationError
from scanmycarbs.services.manual_foods import ManualFoodRepository
from scanmycarbs.services.scans import ScanRepository

_logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return a user by id, if present."""

    def find_by_email(self, email: str) -> UserRecord | None:
        """Return the user with this email, if any."""

    def create_user(self, user_id: UUID, email: str | None) -> UserRecord:
        """Create and return a profile for an authenticated identity."""

    def update_user(self, user_id: UUID, changes: dict[str, object]) -> UserRecord:
        """Apply changes and return the updated profile."""

    def delete_user(self, user_id: UUID) -> None:
        """Delete a user profile."""


@dataclass
class UserService:
    """Application service for profile and account actions."""

    repository: UserRepository
    scan_repository: ScanRepository
    manual_food_repository: ManualFoodRepository

    def ensure_user(self, user_id: UUID, email: str | None) -> UserRecord:
        """Ensure a profile exists for an authenticated identity."""
        existing = self.repository.get_user(user_id)
        if existing:
            return existing
        _logger.info("Creating profile for user %s", user_id)
        return self.repository.create_user(user_id, email)

    def get_profile(self, user_id: UUID) -> UserRecord:
        """Return the user's profile."""
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(
        self, user_id: UUID, name: str | None = None, email: str | None = None
    ) -> UserRecord:
        """Update name and email; an email used by someone else conflicts."""
        self.get_profile(user_id)
        changes: dict[str, object] = {}
        if name is not None:
            changes["name"] = name
        if email:
            other = self.repository.find_by_email(email)
            if other is not None and other.id != user_id:
                raise ConflictError("This email is already in use")
            changes["email"] = email
        if not changes:
            return self.get_profile(user_id)
        return self.repository.update_user(user_id, changes)

    def update_preferences(
        self,
        user_id: UUID,
        language: str | None = None,
        dark_mode: bool | None = None,
        daily_goal: float | None = None,
        clear_daily_goal: bool = False,
    ) -> UserRecord:
        """Update display preferences and the daily calorie goal."""
        self.get_profile(user_id)
        changes: dict[str, object] = {}
        if language:
            changes["language"] = language
        if dark_mode is not None:
            changes["dark_mode"] = dark_mode
        if clear_daily_goal:
            changes["daily_goal"] = None
        elif daily_goal is not None:
            if daily_goal < 0:
                raise ValidationError("Daily goal must be positive")
            changes["daily_goal"] = daily_goal
        if not changes:
            return self.get_profile(user_id)
        return self.repository.update_user(user_id, changes)

    def delete_account(self, user_id: UUID) -> None:
        """Delete the user together with their scans and manual foods."""
        self.get_profile(user_id)
        self.scan_repository.delete_for_user(user_id)
        self.manual_food_repository.delete_for_user(user_id)
        self.repository.delete_user(user_id)
        _logger.info("Deleted account %s", user_id)
