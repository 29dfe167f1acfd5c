"""SQLModel definitions for ledger transactions."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ._columns import money_column, owner_column, utcnow

if TYPE_CHECKING:  # pragma: no cover - import guard for circular dependency
    from .account import Account
    from .category import Category


class Transaction(SQLModel, table=True):
    """A single income or expense entry against one account.

    ``amount`` is always a non-negative magnitude; ``txn_type`` carries the sign.
    ``version`` starts at 1 and is bumped on every update so writers can detect
    a row that changed underneath them.
    """

    __tablename__: ClassVar[str] = "transaction"
    __table_args__ = (
        CheckConstraint("txn_type IN ('income', 'expense')", name="ck_transaction_type"),
        CheckConstraint("amount >= 0", name="ck_transaction_amount"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(sa_column=owner_column())
    account_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("account.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    category_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("category.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
    )
    txn_type: str = Field(nullable=False, max_length=16)
    amount: Decimal = Field(sa_column=money_column())
    description: Optional[str] = Field(default=None, max_length=512)
    occurred_on: date = Field(default_factory=date.today, nullable=False, index=True)
    version: int = Field(default=1, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    account: "Account" = Relationship(
        sa_relationship=relationship("Account", back_populates="transactions")
    )
    category: Optional["Category"] = Relationship(
        sa_relationship=relationship("Category", back_populates="transactions")
    )
