"""Incremental maintenance of ``Account.current_balance``.

Every transaction write calls exactly one of ``on_created``, ``on_updated`` or
``on_deleted`` with the session that performed the write, before that session
commits. The adjustment is a single ``UPDATE ... SET current_balance =
current_balance + :delta`` so concurrent writers to one account serialize in the
database instead of racing on a value read into Python.

Nothing here ever re-sums an account's transactions; see
``fintrack.services.reconcile`` for the offline drift check.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, update
from sqlmodel import Session

from ..errors import ConsistencyFailure
from ..logging_config import get_logger
from ..models._columns import utcnow
from ..models.account import Account
from ..models.transaction import Transaction
from .money import TransactionType, parse_type, signed_amount, to_decimal

logger = get_logger("balance")


@dataclass(frozen=True)
class Contribution:
    """The part of a transaction row that affects a balance."""

    account_id: int
    txn_type: TransactionType
    amount: Decimal

    @classmethod
    def of(cls, txn: Transaction) -> "Contribution":
        return cls(
            account_id=txn.account_id,
            txn_type=parse_type(txn.txn_type),
            amount=to_decimal(txn.amount),
        )

    @property
    def signed(self) -> Decimal:
        return signed_amount(self.txn_type, self.amount)


def adjust_balance(session: Session, *, account_id: int, delta: Decimal, user_id: int) -> None:
    """Atomically add ``delta`` to one account's cached balance.

    Raises ``ConsistencyFailure`` when the row is not there to update; the
    caller's unit of work must then roll back.
    """

    statement = (
        update(Account)
        .where(Account.id == account_id)
        .where(Account.user_id == user_id)
        .values(
            current_balance=func.round(Account.current_balance + delta, 2),
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    result = session.exec(statement)  # type: ignore[call-overload]
    if result.rowcount != 1:
        raise ConsistencyFailure(
            f"Balance adjustment of {delta} did not apply to account {account_id}"
        )
    logger.debug(
        "Balance adjusted",
        extra={"account_id": account_id, "delta": str(delta), "user_id": user_id},
    )


def on_created(session: Session, txn: Transaction, *, user_id: int) -> None:
    """Apply a new transaction's contribution to its account."""

    after = Contribution.of(txn)
    adjust_balance(session, account_id=after.account_id, delta=after.signed, user_id=user_id)


def on_updated(
    session: Session, before: Contribution, after: Contribution, *, user_id: int
) -> None:
    """Revert ``before`` and apply ``after``.

    Same account: one net adjustment. Different accounts: one adjustment each,
    issued in ascending account id so two movers between the same pair of
    accounts take row locks in the same order.
    """

    if before.account_id == after.account_id:
        delta = after.signed - before.signed
        if delta:
            adjust_balance(session, account_id=after.account_id, delta=delta, user_id=user_id)
        return

    adjustments = sorted(
        [(before.account_id, -before.signed), (after.account_id, after.signed)],
        key=lambda item: item[0],
    )
    for account_id, delta in adjustments:
        adjust_balance(session, account_id=account_id, delta=delta, user_id=user_id)


def on_deleted(session: Session, before: Contribution, *, user_id: int) -> None:
    """Remove a deleted transaction's contribution from its account."""

    adjust_balance(session, account_id=before.account_id, delta=-before.signed, user_id=user_id)
