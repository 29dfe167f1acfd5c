"""Exception hierarchy raised by repositories and services."""

from __future__ import annotations

from typing import Optional


class FinTrackError(Exception):
    """Base class for all application errors."""


class ValidationError(FinTrackError, ValueError):
    """Input failed validation before anything was written."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class ReferentialError(FinTrackError, LookupError):
    """A referenced row is missing or belongs to another owner."""

    def __init__(self, entity: str, entity_id: object, message: Optional[str] = None) -> None:
        super().__init__(message or f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class NotFoundError(ReferentialError):
    """The row targeted by an update or delete does not exist for this owner."""


class ConsistencyFailure(FinTrackError, RuntimeError):
    """A row write and its balance adjustment diverged; the unit of work is rolled back."""


class ConcurrentModificationError(ConsistencyFailure):
    """The row changed (or vanished) between read and write."""

    def __init__(self, entity: str, entity_id: object, expected_version: Optional[int] = None) -> None:
        detail = f" (expected version {expected_version})" if expected_version is not None else ""
        super().__init__(f"{entity} {entity_id} was modified concurrently{detail}")
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version


class AuthenticationError(FinTrackError):
    """Credentials were rejected."""


__all__ = [
    "AuthenticationError",
    "ConcurrentModificationError",
    "ConsistencyFailure",
    "FinTrackError",
    "NotFoundError",
    "ReferentialError",
    "ValidationError",
]
