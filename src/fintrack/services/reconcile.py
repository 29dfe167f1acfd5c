"""Drift check for cached account balances.

Steady-state writes never re-sum; this module exists for repairing a database
that was edited outside the application.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from sqlalchemy import case, func, update
from sqlmodel import Session, select

from ..domain.money import TransactionType, to_decimal
from ..logging_config import get_logger
from ..models._columns import utcnow
from ..models.account import Account
from ..models.transaction import Transaction

SessionFactory = Callable[[], Session]

logger = get_logger("reconcile")


@dataclass(frozen=True)
class BalanceDrift:
    """An account whose cached balance disagrees with its transactions."""

    account_id: int
    name: str
    cached: Decimal
    expected: Decimal

    @property
    def difference(self) -> Decimal:
        return self.cached - self.expected


def compute_expected_balance(session: Session, account: Account) -> Decimal:
    """``initial_balance`` plus the signed sum of the account's transactions."""

    signed = case(
        (Transaction.txn_type == TransactionType.INCOME.value, Transaction.amount),
        else_=-Transaction.amount,
    )
    total = session.exec(
        select(func.coalesce(func.sum(signed), 0)).where(
            Transaction.account_id == account.id,
            Transaction.user_id == account.user_id,
        )
    ).one()
    return to_decimal(account.initial_balance) + to_decimal(total)


def _scan(session: Session, user_id: int, *, lock: bool = False) -> list[BalanceDrift]:
    statement = select(Account).where(Account.user_id == user_id).order_by(Account.id)  # type: ignore[arg-type]
    if lock:
        statement = statement.with_for_update()
    drifts = []
    for account in session.exec(statement).all():
        expected = compute_expected_balance(session, account)
        cached = to_decimal(account.current_balance)
        if cached != expected:
            drifts.append(
                BalanceDrift(
                    account_id=account.id,  # type: ignore[arg-type]
                    name=account.name,
                    cached=cached,
                    expected=expected,
                )
            )
    return drifts


def find_drift(*, user_id: int, session_factory: SessionFactory) -> list[BalanceDrift]:
    """List every account of ``user_id`` whose cached balance has drifted."""

    with session_factory() as session:
        return _scan(session, user_id)


def repair_drift(*, user_id: int, session_factory: SessionFactory) -> list[BalanceDrift]:
    """Overwrite drifted balances with the re-summed value; returns what was fixed.

    Scan and rewrite happen in one database transaction with the account rows
    locked, so a concurrent ledger write cannot slip in between.
    """

    with session_factory() as session:
        drifts = _scan(session, user_id, lock=True)
        for drift in drifts:
            session.exec(  # type: ignore[call-overload]
                update(Account)
                .where(Account.id == drift.account_id, Account.user_id == user_id)
                .values(current_balance=drift.expected, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            logger.warning(
                "Balance drift repaired",
                extra={
                    "user_id": user_id,
                    "account_id": drift.account_id,
                    "cached": str(drift.cached),
                    "expected": str(drift.expected),
                },
            )
        session.commit()
    return drifts
