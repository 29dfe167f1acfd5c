"""Profile lookup and preference updates."""

from __future__ import annotations

from typing import Optional

from ..domain.repositories import ProfileRepository
from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.profile import Profile
from .accounts import clean_currency

logger = get_logger("profiles")

DISPLAY_NAME_MAX_LENGTH = 128


def get_profile(repo: ProfileRepository, *, user_id: int) -> Profile:
    profile = repo.get_by_user(user_id=user_id)
    if profile is None:
        raise NotFoundError("profile", user_id)
    return profile


def update_profile(
    repo: ProfileRepository,
    *,
    user_id: int,
    display_name: Optional[str] = None,
    default_currency: Optional[str] = None,
) -> Profile:
    """Change display name and/or default currency label."""

    if display_name is not None:
        display_name = display_name.strip()
        if not display_name or len(display_name) > DISPLAY_NAME_MAX_LENGTH:
            raise ValidationError(
                f"Display name must be 1-{DISPLAY_NAME_MAX_LENGTH} characters", field="display_name"
            )
    if default_currency is not None:
        default_currency = clean_currency(default_currency)
    profile = repo.update(
        user_id=user_id, display_name=display_name, default_currency=default_currency
    )
    logger.info("Profile updated", extra={"user_id": user_id})
    return profile
