"""Dashboard figures: income, expenses and balance."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..domain.money import to_decimal
from ..domain.repositories import AccountRepository, TransactionRepository
from ..errors import NotFoundError


@dataclass(frozen=True)
class BalanceSummary:
    """Totals shown on the dashboard for one account or all of them."""

    income: Decimal
    expenses: Decimal
    balance: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses


def compute_summary(
    *,
    accounts: AccountRepository,
    transactions: TransactionRepository,
    user_id: int,
    account_id: Optional[int] = None,
) -> BalanceSummary:
    """Return income/expense totals and the cached balance.

    ``balance`` is the maintained ``current_balance`` (summed across accounts
    when ``account_id`` is None), never a re-sum of transactions.
    """

    if account_id is None:
        balance = accounts.total_balance(user_id=user_id)
    else:
        account = accounts.get_by_id(account_id, user_id=user_id)
        if account is None:
            raise NotFoundError("account", account_id)
        balance = to_decimal(account.current_balance)

    totals = transactions.sum_by_type(user_id=user_id, account_id=account_id)
    return BalanceSummary(
        income=totals["income"],
        expenses=totals["expense"],
        balance=balance,
    )
