"""SQLModel implementation of Transaction repository.

Every write goes through the balance maintainer inside the same session, so
the row change and the account adjustment commit or roll back together.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ...domain import balance
from ...domain.balance import Contribution
from ...domain.money import ZERO, parse_amount, parse_type, to_decimal
from ...errors import (
    ConcurrentModificationError,
    FinTrackError,
    NotFoundError,
    ReferentialError,
    ValidationError,
)
from ...models._columns import utcnow
from ...models.account import Account
from ...models.category import Category
from ...models.transaction import Transaction


def _check_references(session: Session, txn: Transaction, *, user_id: int) -> None:
    """Reject account/category ids that are missing or owned by someone else."""

    if txn.account_id is None:
        raise ValidationError("account_id is required", field="account_id")
    account_owner = session.exec(
        select(Account.user_id).where(Account.id == txn.account_id)
    ).first()
    if account_owner is None or account_owner != user_id:
        raise ReferentialError("account", txn.account_id)

    if txn.category_id is None:
        return
    category = session.exec(
        select(Category).where(Category.id == txn.category_id, Category.user_id == user_id)
    ).first()
    if category is None:
        raise ReferentialError("category", txn.category_id)
    if category.category_type != txn.txn_type:
        raise ValidationError(
            f"Category {category.name!r} is for {category.category_type} transactions, "
            f"not {txn.txn_type}",
            field="category_id",
        )


def _translate_integrity_error(exc: IntegrityError) -> FinTrackError:
    message = str(exc.orig).lower()
    if "foreign key" in message:
        return ReferentialError("reference", None, "Referenced row does not exist")
    return ValidationError(f"Transaction rejected by the database: {exc.orig}")


def _flush_or_translate(session: Session) -> None:
    try:
        session.flush()
    except IntegrityError as exc:
        raise _translate_integrity_error(exc) from exc


class SQLModelTransactionRepository:
    """SQLModel-based transaction repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @staticmethod
    def _load(session: Session, transaction_id: int, user_id: int) -> Transaction:
        txn = session.exec(
            select(Transaction)
            .where(Transaction.id == transaction_id)
            .where(Transaction.user_id == user_id)
            .with_for_update()
        ).first()
        if txn is None:
            raise NotFoundError("transaction", transaction_id)
        return txn

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Transaction)
                .where(Transaction.id == transaction_id)
                .where(Transaction.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int, limit: int = 100, offset: int = 0) -> list[Transaction]:
        """List transactions newest first with pagination."""
        return self.search(user_id=user_id, limit=limit, offset=offset)

    def filter_by_account(self, account_id: int, *, user_id: int) -> list[Transaction]:
        """Get all transactions for a specific account."""
        return self.search(user_id=user_id, account_id=account_id)

    def search(
        self,
        *,
        user_id: int,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        txn_type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        text: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Transaction]:
        """Filtered listing ordered by date then creation time, newest first."""
        with self.session_factory() as session:
            statement = select(Transaction).where(Transaction.user_id == user_id)
            if account_id is not None:
                statement = statement.where(Transaction.account_id == account_id)
            if category_id is not None:
                statement = statement.where(Transaction.category_id == category_id)
            if txn_type is not None:
                statement = statement.where(Transaction.txn_type == parse_type(txn_type).value)
            if start_date is not None:
                statement = statement.where(Transaction.occurred_on >= start_date)
            if end_date is not None:
                statement = statement.where(Transaction.occurred_on <= end_date)
            if text:
                statement = statement.where(Transaction.description.contains(text))  # type: ignore[union-attr]

            statement = statement.order_by(
                Transaction.occurred_on.desc(),  # type: ignore[attr-defined]
                Transaction.created_at.desc(),  # type: ignore[attr-defined]
                Transaction.id.desc(),  # type: ignore[union-attr]
            )
            if offset:
                statement = statement.offset(offset)
            if limit is not None:
                statement = statement.limit(limit)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, transaction: Transaction, *, user_id: int) -> Transaction:
        """Insert a transaction and apply its contribution to the account."""
        with self.session_factory() as session:
            transaction.user_id = user_id
            transaction.txn_type = parse_type(transaction.txn_type).value
            transaction.amount = parse_amount(transaction.amount)
            transaction.version = 1
            _check_references(session, transaction, user_id=user_id)

            session.add(transaction)
            _flush_or_translate(session)
            balance.on_created(session, transaction, user_id=user_id)

            session.commit()
            session.refresh(transaction)
            session.expunge(transaction)
            return transaction

    def update(
        self,
        transaction: Transaction,
        *,
        user_id: int,
        expected_version: Optional[int] = None,
    ) -> Transaction:
        """Replace a transaction's fields, reverting the old contribution and applying the new.

        The row is written with ``WHERE version = <version read>``; if another
        writer got there first nothing is changed and
        ``ConcurrentModificationError`` is raised.
        """
        if transaction.id is None:
            raise NotFoundError("transaction", None)
        with self.session_factory() as session:
            stored = self._load(session, transaction.id, user_id)
            seen_version = stored.version
            if expected_version is not None and expected_version != seen_version:
                raise ConcurrentModificationError("transaction", transaction.id, expected_version)

            before = Contribution.of(stored)
            transaction.user_id = user_id
            transaction.txn_type = parse_type(transaction.txn_type).value
            transaction.amount = parse_amount(transaction.amount)
            _check_references(session, transaction, user_id=user_id)

            try:
                result = session.exec(  # type: ignore[call-overload]
                    update(Transaction)
                    .where(Transaction.id == transaction.id)
                    .where(Transaction.user_id == user_id)
                    .where(Transaction.version == seen_version)
                    .values(
                        account_id=transaction.account_id,
                        category_id=transaction.category_id,
                        txn_type=transaction.txn_type,
                        amount=transaction.amount,
                        description=transaction.description,
                        occurred_on=transaction.occurred_on,
                        version=seen_version + 1,
                        updated_at=utcnow(),
                    )
                    .execution_options(synchronize_session=False)
                )
            except IntegrityError as exc:
                raise _translate_integrity_error(exc) from exc
            if result.rowcount != 1:
                raise ConcurrentModificationError("transaction", transaction.id, seen_version)

            balance.on_updated(session, before, Contribution.of(transaction), user_id=user_id)

            session.commit()
            session.refresh(stored)
            session.expunge(stored)
            return stored

    def delete(
        self,
        transaction_id: int,
        *,
        user_id: int,
        expected_version: Optional[int] = None,
    ) -> Transaction:
        """Delete a transaction and remove its contribution; returns the deleted row."""
        with self.session_factory() as session:
            stored = self._load(session, transaction_id, user_id)
            seen_version = stored.version
            if expected_version is not None and expected_version != seen_version:
                raise ConcurrentModificationError("transaction", transaction_id, expected_version)

            before = Contribution.of(stored)
            result = session.exec(  # type: ignore[call-overload]
                delete(Transaction)
                .where(Transaction.id == transaction_id)
                .where(Transaction.user_id == user_id)
                .where(Transaction.version == seen_version)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ConcurrentModificationError("transaction", transaction_id, seen_version)

            balance.on_deleted(session, before, user_id=user_id)

            session.expunge(stored)
            session.commit()
            return stored

    def sum_by_type(
        self, *, user_id: int, account_id: Optional[int] = None
    ) -> dict[str, Decimal]:
        """Income and expense totals, optionally for one account."""
        with self.session_factory() as session:
            statement = (
                select(Transaction.txn_type, func.coalesce(func.sum(Transaction.amount), 0))
                .where(Transaction.user_id == user_id)
                .group_by(Transaction.txn_type)
            )
            if account_id is not None:
                statement = statement.where(Transaction.account_id == account_id)
            totals = {"income": ZERO, "expense": ZERO}
            for txn_type, total in session.exec(statement).all():
                totals[txn_type] = to_decimal(total)
            return totals
