"""Per-user profile provisioned at sign-up."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import Column, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ._columns import utcnow

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


class Profile(SQLModel, table=True):
    """Display preferences for a user."""

    __tablename__: ClassVar[str] = "profile"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
            index=True,
        )
    )
    username: Optional[str] = Field(default=None, max_length=64)
    display_name: Optional[str] = Field(default=None, max_length=128)
    default_currency: str = Field(default="USD", nullable=False, max_length=16)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="profile"))
