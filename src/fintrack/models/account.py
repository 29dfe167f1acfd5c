"""Account model; owns the cached running balance."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ._columns import money_column, owner_column, utcnow

if TYPE_CHECKING:  # pragma: no cover
    from .transaction import Transaction


class Account(SQLModel, table=True):
    """A named pot of money in a single currency.

    ``current_balance`` is derived: ``initial_balance`` plus the signed amount of
    every transaction pointing at the account. Only the balance maintainer
    (``fintrack.domain.balance``) writes it; repositories never copy it from
    caller-supplied objects.
    """

    __tablename__: ClassVar[str] = "account"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(sa_column=owner_column())
    name: str = Field(nullable=False, max_length=128)
    description: Optional[str] = Field(default=None, max_length=512)
    currency: str = Field(default="USD", nullable=False, max_length=16)
    initial_balance: Decimal = Field(default=Decimal("0.00"), sa_column=money_column())
    current_balance: Decimal = Field(default=Decimal("0.00"), sa_column=money_column())
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    transactions: list["Transaction"] = Relationship(
        sa_relationship=relationship(
            "Transaction",
            back_populates="account",
            passive_deletes=True,
        )
    )
