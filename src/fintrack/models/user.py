"""User model holding sign-in credentials."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ._columns import utcnow

if TYPE_CHECKING:  # pragma: no cover
    from .profile import Profile


class User(SQLModel, table=True):
    """Application user; owner of every account, category and transaction."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(nullable=False, unique=True, index=True, max_length=64)
    password_hash: str = Field(nullable=False, max_length=255)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    last_login: Optional[datetime] = Field(default=None)

    profile: Optional["Profile"] = Relationship(
        sa_relationship=relationship("Profile", back_populates="user", uselist=False)
    )
