"""Profile, preferences and account endpoints."""

from fastapi import APIRouter, Depends

from scanmycarbs.api import serializers
from scanmycarbs.api.deps import current_user, get_container
from scanmycarbs.api.schemas import UpdatePreferencesRequest, UpdateProfileRequest
from scanmycarbs.containers import AppContainer
from scanmycarbs.domain.models import UserRecord

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/profile")
async def get_profile(user: UserRecord = Depends(current_user)) -> dict[str, object]:
    return serializers.envelope({"user": serializers.user(user)})


@router.patch("/profile")
async def update_profile(
    body: UpdateProfileRequest,
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    updated = container.user_service.update_profile(
        user.id, name=body.name, email=body.email
    )
    return serializers.envelope(
        {"user": serializers.user(updated)}, message="Profile updated"
    )


@router.patch("/preferences")
async def update_preferences(
    body: UpdatePreferencesRequest,
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Update language, theme and the daily goal; ``dailyGoal: null`` clears it."""
    updated = container.user_service.update_preferences(
        user.id,
        language=body.language,
        dark_mode=body.dark_mode,
        daily_goal=body.daily_goal,
        clear_daily_goal=(
            "daily_goal" in body.model_fields_set and body.daily_goal is None
        ),
    )
    return serializers.envelope(
        {"user": serializers.user(updated)}, message="Preferences updated"
    )


@router.delete("/account")
async def delete_account(
    container: AppContainer = Depends(get_container),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Delete the account with all of its scans and manual foods."""
    container.user_service.delete_account(user.id)
    return serializers.envelope(message="Account deleted")
