"""SQLModel implementation of Account repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy import delete, func
from sqlmodel import Session, select

from ...domain import balance
from ...domain.money import ZERO, parse_amount, to_decimal
from ...errors import NotFoundError
from ...models._columns import utcnow
from ...models.account import Account
from ...models.transaction import Transaction


class SQLModelAccountRepository:
    """SQLModel-based account repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @staticmethod
    def _load(session: Session, account_id: int, user_id: int) -> Account:
        account = session.exec(
            select(Account).where(Account.id == account_id, Account.user_id == user_id)
        ).first()
        if account is None:
            raise NotFoundError("account", account_id)
        return account

    def get_by_id(self, account_id: int, *, user_id: int) -> Optional[Account]:
        """Retrieve an account by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Account).where(Account.id == account_id, Account.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[Account]:
        """List accounts in creation order."""
        with self.session_factory() as session:
            statement = (
                select(Account)
                .where(Account.user_id == user_id)
                .order_by(Account.created_at, Account.id)  # type: ignore[arg-type]
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, account: Account, *, user_id: int) -> Account:
        """Create a new account whose running balance starts at its initial balance."""
        with self.session_factory() as session:
            account.user_id = user_id
            account.initial_balance = parse_amount(
                account.initial_balance, allow_negative=True, field="initial_balance"
            )
            account.current_balance = account.initial_balance
            session.add(account)
            session.commit()
            session.refresh(account)
            session.expunge(account)
            return account

    def update(self, account: Account, *, user_id: int) -> Account:
        """Update name, description, currency and initial balance.

        ``current_balance`` on the passed object is ignored. A changed initial
        balance moves the running balance by the same difference.
        """
        if account.id is None:
            raise NotFoundError("account", None)
        with self.session_factory() as session:
            stored = self._load(session, account.id, user_id)
            old_initial = to_decimal(stored.initial_balance)
            new_initial = parse_amount(
                account.initial_balance, allow_negative=True, field="initial_balance"
            )

            stored.name = account.name
            stored.description = account.description
            stored.currency = account.currency
            stored.initial_balance = new_initial
            stored.updated_at = utcnow()
            session.add(stored)
            session.flush()

            shift = new_initial - old_initial
            if shift:
                balance.adjust_balance(
                    session, account_id=account.id, delta=shift, user_id=user_id
                )

            session.commit()
            session.refresh(stored)
            session.expunge(stored)
            return stored

    def delete(self, account_id: int, *, user_id: int) -> int:
        """Delete an account and every transaction on it.

        Returns the number of transactions removed.
        """
        with self.session_factory() as session:
            account = self._load(session, account_id, user_id)
            result = session.exec(  # type: ignore[call-overload]
                delete(Transaction)
                .where(Transaction.account_id == account_id)
                .where(Transaction.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            removed = result.rowcount or 0
            session.delete(account)
            session.commit()
            return removed

    def total_balance(self, *, user_id: int) -> Decimal:
        """Sum of current balances across the owner's accounts."""
        with self.session_factory() as session:
            total = session.exec(
                select(func.coalesce(func.sum(Account.current_balance), 0)).where(
                    Account.user_id == user_id
                )
            ).one()
            return to_decimal(total) if total is not None else ZERO
