"""Profile repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.profile import Profile


class ProfileRepository(Protocol):
    def get_by_user(self, *, user_id: int) -> Optional[Profile]:
        ...

    def update(
        self,
        *,
        user_id: int,
        display_name: Optional[str] = None,
        default_currency: Optional[str] = None,
    ) -> Profile:
        ...
