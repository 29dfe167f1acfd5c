"""Account management services."""

from __future__ import annotations

from typing import Any, Optional

from ..domain.money import parse_amount
from ..domain.repositories import AccountRepository
from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.account import Account

logger = get_logger("accounts")

_UNSET: Any = object()
NAME_MAX_LENGTH = 128
CURRENCY_MAX_LENGTH = 16


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Account name is required", field="name")
    if len(cleaned) > NAME_MAX_LENGTH:
        raise ValidationError(f"Account name must be at most {NAME_MAX_LENGTH} characters", field="name")
    return cleaned


def clean_currency(currency: Optional[str], default: str = "USD") -> str:
    """Normalise a currency label; labels are free text and never converted."""

    cleaned = (currency or "").strip().upper() or default
    if len(cleaned) > CURRENCY_MAX_LENGTH:
        raise ValidationError(
            f"Currency label must be at most {CURRENCY_MAX_LENGTH} characters", field="currency"
        )
    return cleaned


def open_account(
    repo: AccountRepository,
    *,
    user_id: int,
    name: str,
    initial_balance: object = "0",
    currency: Optional[str] = None,
    description: Optional[str] = None,
    default_currency: str = "USD",
) -> Account:
    """Create an account; its running balance starts equal to ``initial_balance``."""

    account = Account(
        user_id=user_id,
        name=_clean_name(name),
        description=(description or "").strip() or None,
        currency=clean_currency(currency, default_currency),
        initial_balance=parse_amount(initial_balance, allow_negative=True, field="initial_balance"),
    )
    created = repo.create(account, user_id=user_id)
    logger.info(
        "Account opened",
        extra={
            "user_id": user_id,
            "account_id": created.id,
            "currency": created.currency,
            "initial_balance": str(created.initial_balance),
        },
    )
    return created


def update_account(
    repo: AccountRepository,
    account_id: int,
    *,
    user_id: int,
    name: object = _UNSET,
    description: object = _UNSET,
    currency: object = _UNSET,
    initial_balance: object = _UNSET,
) -> Account:
    """Edit an account's descriptive fields or its initial balance."""

    current = repo.get_by_id(account_id, user_id=user_id)
    if current is None:
        raise NotFoundError("account", account_id)

    changes = Account(
        id=current.id,
        user_id=user_id,
        name=current.name if name is _UNSET else _clean_name(name),  # type: ignore[arg-type]
        description=(
            current.description
            if description is _UNSET
            else ((description or "").strip() or None)  # type: ignore[union-attr]
        ),
        currency=(
            current.currency
            if currency is _UNSET
            else clean_currency(currency, current.currency)  # type: ignore[arg-type]
        ),
        initial_balance=(
            current.initial_balance
            if initial_balance is _UNSET
            else parse_amount(initial_balance, allow_negative=True, field="initial_balance")
        ),
    )
    updated = repo.update(changes, user_id=user_id)
    logger.info(
        "Account updated",
        extra={"user_id": user_id, "account_id": account_id},
    )
    return updated


def close_account(repo: AccountRepository, account_id: int, *, user_id: int) -> int:
    """Delete an account together with its transactions; returns how many were removed."""

    removed = repo.delete(account_id, user_id=user_id)
    logger.info(
        "Account deleted",
        extra={"user_id": user_id, "account_id": account_id, "transactions_removed": removed},
    )
    return removed


def list_accounts(repo: AccountRepository, *, user_id: int) -> list[Account]:
    return repo.list_all(user_id=user_id)
