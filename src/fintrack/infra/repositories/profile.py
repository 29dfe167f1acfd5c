"""Profile repository keyed by owning user."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...errors import NotFoundError
from ...models._columns import utcnow
from ...models.profile import Profile


class SQLModelProfileRepository:
    """SQLModel-based profile repository."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_by_user(self, *, user_id: int) -> Optional[Profile]:
        with self.session_factory() as session:
            profile = session.exec(select(Profile).where(Profile.user_id == user_id)).first()
            if profile:
                session.expunge(profile)
            return profile

    def update(
        self,
        *,
        user_id: int,
        display_name: Optional[str] = None,
        default_currency: Optional[str] = None,
    ) -> Profile:
        """Change the fields that were passed; ``None`` leaves a field alone."""
        with self.session_factory() as session:
            profile = session.exec(select(Profile).where(Profile.user_id == user_id)).first()
            if profile is None:
                raise NotFoundError("profile", user_id)
            if display_name is not None:
                profile.display_name = display_name
            if default_currency is not None:
                profile.default_currency = default_currency
            profile.updated_at = utcnow()
            session.add(profile)
            session.commit()
            session.refresh(profile)
            session.expunge(profile)
            return profile


__all__ = ["SQLModelProfileRepository"]
