"""SQLModel implementation of Category repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from ...domain.money import parse_type
from ...errors import NotFoundError, ValidationError
from ...models.category import Category
from ...models.transaction import Transaction


class SQLModelCategoryRepository:
    """SQLModel-based category repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @staticmethod
    def _load(session: Session, category_id: int, user_id: int) -> Category:
        category = session.exec(
            select(Category).where(Category.id == category_id, Category.user_id == user_id)
        ).first()
        if category is None:
            raise NotFoundError("category", category_id)
        return category

    def get_by_id(self, category_id: int, *, user_id: int) -> Optional[Category]:
        """Retrieve a category by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Category).where(Category.id == category_id, Category.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[Category]:
        """List all categories."""
        with self.session_factory() as session:
            statement = (
                select(Category)
                .where(Category.user_id == user_id)
                .order_by(Category.category_type, Category.name)  # type: ignore[arg-type]
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_by_type(self, category_type: str, *, user_id: int) -> list[Category]:
        """List categories filtered by type (income/expense)."""
        with self.session_factory() as session:
            statement = (
                select(Category)
                .where(Category.user_id == user_id)
                .where(Category.category_type == parse_type(category_type).value)
                .order_by(Category.name)  # type: ignore[arg-type]
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, category: Category, *, user_id: int) -> Category:
        """Create a new category."""
        with self.session_factory() as session:
            category.user_id = user_id
            category.category_type = parse_type(category.category_type).value
            session.add(category)
            session.commit()
            session.refresh(category)
            session.expunge(category)
            return category

    def update(self, category: Category, *, user_id: int) -> Category:
        """Update name, colour and type.

        The type may only change while no transaction of the old type uses the
        category.
        """
        if category.id is None:
            raise NotFoundError("category", None)
        with self.session_factory() as session:
            stored = self._load(session, category.id, user_id)
            new_type = parse_type(category.category_type).value
            if new_type != stored.category_type:
                in_use = session.exec(
                    select(Transaction.id)
                    .where(Transaction.category_id == stored.id)
                    .where(Transaction.txn_type != new_type)
                    .limit(1)
                ).first()
                if in_use is not None:
                    raise ValidationError(
                        f"Category {stored.name!r} is used by {stored.category_type} transactions",
                        field="category_type",
                    )

            stored.name = category.name
            stored.color = category.color
            stored.category_type = new_type
            session.add(stored)
            session.commit()
            session.refresh(stored)
            session.expunge(stored)
            return stored

    def delete(self, category_id: int, *, user_id: int) -> int:
        """Delete a category, leaving its transactions uncategorized.

        Returns the number of transactions that lost their category.
        """
        with self.session_factory() as session:
            category = self._load(session, category_id, user_id)
            result = session.exec(  # type: ignore[call-overload]
                update(Transaction)
                .where(Transaction.category_id == category_id)
                .values(category_id=None)
                .execution_options(synchronize_session=False)
            )
            cleared = result.rowcount or 0
            session.delete(category)
            session.commit()
            return cleared
