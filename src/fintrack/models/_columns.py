"""Shared column helpers for table models."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Integer, Numeric


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def money_column(*, nullable: bool = False) -> Column:
    """NUMERIC(15, 2) column returning ``Decimal`` values."""

    return Column(Numeric(precision=15, scale=2, asdecimal=True), nullable=nullable)


def owner_column() -> Column:
    return Column(
        Integer,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
