"""Dashboard summary and offline balance reconciliation."""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import text

from fintrack.errors import NotFoundError
from fintrack.services import reconcile, summary


def test_summary_for_all_accounts(account_factory, transaction_factory, account_repo, transaction_repo, user):
    a = account_factory(name="A", initial_balance="100.00")
    b = account_factory(name="B", initial_balance="50.00")
    transaction_factory(a, txn_type="income", amount="20.00")
    transaction_factory(b, txn_type="expense", amount="5.50")

    result = summary.compute_summary(accounts=account_repo, transactions=transaction_repo, user_id=user.id)

    assert result.income == Decimal("20.00")
    assert result.expenses == Decimal("5.50")
    assert result.balance == Decimal("164.50")
    assert result.net == Decimal("14.50")


def test_summary_for_one_account(account_factory, transaction_factory, account_repo, transaction_repo, user):
    a = account_factory(name="A", initial_balance="100.00")
    b = account_factory(name="B")
    transaction_factory(a, txn_type="expense", amount="1.00")
    transaction_factory(b, txn_type="income", amount="9.00")

    result = summary.compute_summary(
        accounts=account_repo, transactions=transaction_repo, user_id=user.id, account_id=a.id
    )

    assert (result.income, result.expenses, result.balance) == (
        Decimal("0.00"),
        Decimal("1.00"),
        Decimal("99.00"),
    )


def test_summary_unknown_account(account_repo, transaction_repo, user):
    with pytest.raises(NotFoundError):
        summary.compute_summary(
            accounts=account_repo, transactions=transaction_repo, user_id=user.id, account_id=77
        )


def test_no_drift_after_normal_use(account_factory, transaction_factory, session_factory, user):
    acct = account_factory(initial_balance="10.00")
    transaction_factory(acct, txn_type="income", amount="2.50")
    transaction_factory(acct, txn_type="expense", amount="1.25")

    assert reconcile.find_drift(user_id=user.id, session_factory=session_factory) == []


def test_drift_is_found_and_repaired(account_factory, transaction_factory, session_factory, user, balance_of):
    acct = account_factory(name="Tampered", initial_balance="10.00")
    transaction_factory(acct, txn_type="income", amount="5.00")
    with session_factory() as session:
        session.connection().execute(text("UPDATE account SET current_balance = 999 WHERE id = :id"), {"id": acct.id})

    drifts = reconcile.find_drift(user_id=user.id, session_factory=session_factory)
    assert len(drifts) == 1
    assert drifts[0].account_id == acct.id
    assert drifts[0].expected == Decimal("15.00")
    assert drifts[0].difference == Decimal("984.00")

    repaired = reconcile.repair_drift(user_id=user.id, session_factory=session_factory)
    assert [d.account_id for d in repaired] == [acct.id]
    assert balance_of(acct) == Decimal("15.00")
    assert reconcile.find_drift(user_id=user.id, session_factory=session_factory) == []


def test_drift_check_is_scoped_to_owner(account_factory, session_factory, other_user, user):
    theirs = account_factory(name="Theirs", owner=other_user)
    with session_factory() as session:
        session.connection().execute(text("UPDATE account SET current_balance = 1 WHERE id = :id"), {"id": theirs.id})

    assert reconcile.find_drift(user_id=user.id, session_factory=session_factory) == []
    assert len(reconcile.find_drift(user_id=other_user.id, session_factory=session_factory)) == 1
