"""Ledger operations: record, edit and delete transactions, plus listing helpers.

Input is normalised here (type, amount, date, text) so the repository only ever
sees clean values; the repository then performs the write and the balance
adjustment as one unit of work.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..domain.money import parse_amount, parse_type
from ..domain.repositories import TransactionRepository
from ..errors import FinTrackError, NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.transaction import Transaction

logger = get_logger("ledger")

_UNSET: Any = object()
DESCRIPTION_MAX_LENGTH = 512


@dataclass
class LedgerFilters:
    """Filters applied to ledger listings."""

    user_id: int
    account_id: Optional[int] = None
    category_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    text: Optional[str] = None
    txn_type: str = "all"  # income | expense | all


@dataclass
class Pagination:
    """Simple pagination parameters."""

    page: int = 1
    per_page: int = 25


def parse_date(value: object, *, field: str = "occurred_on") -> date:
    """Accept a ``date``, a ``datetime`` or an ISO ``YYYY-MM-DD`` string."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"{field} must be a calendar date (YYYY-MM-DD): {value!r}", field=field)


def _clean_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    if len(cleaned) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"description must be at most {DESCRIPTION_MAX_LENGTH} characters", field="description"
        )
    return cleaned or None


def _require_id(value: object, field: str) -> int:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required", field=field)
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer id: {value!r}", field=field) from None


def _optional_id(value: object, field: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return _require_id(value, field)


def record_transaction(
    repo: TransactionRepository,
    *,
    user_id: int,
    account_id: object,
    txn_type: object,
    amount: object,
    occurred_on: object = None,
    category_id: object = None,
    description: Optional[str] = None,
) -> Transaction:
    """Create a transaction; the account balance moves by its signed amount."""

    try:
        txn = Transaction(
            user_id=user_id,
            account_id=_require_id(account_id, "account_id"),
            category_id=_optional_id(category_id, "category_id"),
            txn_type=parse_type(txn_type).value,
            amount=parse_amount(amount),
            description=_clean_description(description),
            occurred_on=date.today() if occurred_on is None else parse_date(occurred_on),
        )
        created = repo.create(txn, user_id=user_id)
    except FinTrackError as exc:
        logger.warning(
            "Transaction rejected",
            extra={"user_id": user_id, "operation": "create", "error": str(exc)},
        )
        raise

    logger.info(
        "Transaction recorded",
        extra={
            "user_id": user_id,
            "transaction_id": created.id,
            "account_id": created.account_id,
            "txn_type": created.txn_type,
            "amount": str(created.amount),
        },
    )
    return created


def edit_transaction(
    repo: TransactionRepository,
    transaction_id: int,
    *,
    user_id: int,
    account_id: object = _UNSET,
    txn_type: object = _UNSET,
    amount: object = _UNSET,
    occurred_on: object = _UNSET,
    category_id: object = _UNSET,
    description: object = _UNSET,
    expected_version: Optional[int] = None,
) -> Transaction:
    """Change any subset of a transaction's fields.

    Omitted fields keep their stored value; ``category_id=None`` and
    ``description=None`` clear those fields. Pass ``expected_version`` (the
    ``version`` the caller last saw) to fail instead of overwriting a newer edit.
    """

    try:
        current = repo.get_by_id(transaction_id, user_id=user_id)
        if current is None:
            raise NotFoundError("transaction", transaction_id)

        txn = Transaction(
            id=current.id,
            user_id=user_id,
            account_id=(
                current.account_id if account_id is _UNSET else _require_id(account_id, "account_id")
            ),
            category_id=(
                current.category_id
                if category_id is _UNSET
                else _optional_id(category_id, "category_id")
            ),
            txn_type=current.txn_type if txn_type is _UNSET else parse_type(txn_type).value,
            amount=current.amount if amount is _UNSET else parse_amount(amount),
            description=(
                current.description
                if description is _UNSET
                else _clean_description(description)  # type: ignore[arg-type]
            ),
            occurred_on=current.occurred_on if occurred_on is _UNSET else parse_date(occurred_on),
        )
        # Without an explicit version, guard against edits landing between the
        # read above and the write below.
        version = expected_version if expected_version is not None else current.version
        updated = repo.update(txn, user_id=user_id, expected_version=version)
    except FinTrackError as exc:
        logger.warning(
            "Transaction edit rejected",
            extra={
                "user_id": user_id,
                "transaction_id": transaction_id,
                "operation": "update",
                "error": str(exc),
            },
        )
        raise

    logger.info(
        "Transaction updated",
        extra={
            "user_id": user_id,
            "transaction_id": updated.id,
            "account_id": updated.account_id,
            "txn_type": updated.txn_type,
            "amount": str(updated.amount),
            "version": updated.version,
        },
    )
    return updated


def delete_transaction(
    repo: TransactionRepository,
    transaction_id: int,
    *,
    user_id: int,
    expected_version: Optional[int] = None,
) -> Transaction:
    """Delete a transaction; its contribution is removed from the account balance."""

    try:
        deleted = repo.delete(transaction_id, user_id=user_id, expected_version=expected_version)
    except FinTrackError as exc:
        logger.warning(
            "Transaction delete rejected",
            extra={
                "user_id": user_id,
                "transaction_id": transaction_id,
                "operation": "delete",
                "error": str(exc),
            },
        )
        raise

    logger.info(
        "Transaction deleted",
        extra={
            "user_id": user_id,
            "transaction_id": transaction_id,
            "account_id": deleted.account_id,
            "amount": str(deleted.amount),
        },
    )
    return deleted


def list_transactions(
    repo: TransactionRepository, *, user_id: int, limit: int = 100, offset: int = 0
) -> list[Transaction]:
    """Newest-first ledger page."""

    return repo.list_all(user_id=user_id, limit=limit, offset=offset)


def filtered_transactions(
    repo: TransactionRepository, filters: LedgerFilters
) -> list[Transaction]:
    """Fetch transactions matching the supplied filters, newest first."""

    txn_type = None if filters.txn_type in ("", "all", None) else filters.txn_type
    return repo.search(
        user_id=filters.user_id,
        account_id=filters.account_id,
        category_id=filters.category_id,
        txn_type=txn_type,
        start_date=filters.start_date,
        end_date=filters.end_date,
        text=filters.text,
    )


def paginate_transactions(
    txs: list[Transaction], pagination: Pagination
) -> tuple[list[Transaction], int]:
    """Return the current page of transactions and total count."""

    total = len(txs)
    page = max(1, pagination.page)
    per_page = max(1, pagination.per_page)
    start = (page - 1) * per_page
    end = start + per_page
    return txs[start:end], total
