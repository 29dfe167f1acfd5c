"""Ledger category definitions."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import CheckConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ._columns import owner_column, utcnow

if TYPE_CHECKING:  # pragma: no cover
    from .transaction import Transaction

DEFAULT_CATEGORY_COLOR = "#6b7280"


class Category(SQLModel, table=True):
    """Transaction category; ``category_type`` limits which transactions may use it."""

    __tablename__: ClassVar[str] = "category"
    __table_args__ = (
        CheckConstraint("category_type IN ('income', 'expense')", name="ck_category_type"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(sa_column=owner_column())
    name: str = Field(index=True, nullable=False, max_length=64)
    color: str = Field(default=DEFAULT_CATEGORY_COLOR, nullable=False, max_length=7)
    category_type: str = Field(default="expense", nullable=False, max_length=16)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    transactions: list["Transaction"] = Relationship(
        sa_relationship=relationship(
            "Transaction",
            back_populates="category",
            passive_deletes=True,
        )
    )
