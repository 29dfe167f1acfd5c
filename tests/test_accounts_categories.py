"""Account and category services."""

from __future__ import annotations

from decimal import Decimal

import pytest

from fintrack.errors import NotFoundError, ValidationError
from fintrack.models import Account
from fintrack.models.category import DEFAULT_CATEGORY_COLOR
from fintrack.services import accounts, categories, ledger_service


# -- accounts -----------------------------------------------------------------


def test_open_account_starts_at_initial_balance(account_factory):
    acct = account_factory(name="  Wallet ", initial_balance="-20.5", currency=" eur ")

    assert acct.name == "Wallet"
    assert acct.currency == "EUR"
    assert acct.initial_balance == Decimal("-20.50")
    assert acct.current_balance == Decimal("-20.50")


def test_open_account_uses_default_currency(account_repo, user):
    acct = accounts.open_account(
        account_repo, user_id=user.id, name="Cash", default_currency="GBP"
    )
    assert acct.currency == "GBP"
    assert acct.current_balance == Decimal("0.00")


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"name": "  "}, "name"),
        ({"name": "x" * 129}, "name"),
        ({"name": "ok", "currency": "C" * 17}, "currency"),
        ({"name": "ok", "initial_balance": "lots"}, "initial_balance"),
    ],
)
def test_open_account_validation(account_repo, user, kwargs, field):
    with pytest.raises(ValidationError) as excinfo:
        accounts.open_account(account_repo, user_id=user.id, **kwargs)
    assert excinfo.value.field == field


def test_update_account_descriptive_fields_keep_balance(account_factory, transaction_factory, account_repo, user, balance_of):
    acct = account_factory(initial_balance="10.00")
    transaction_factory(acct, txn_type="income", amount="5.00")

    updated = accounts.update_account(
        account_repo, acct.id, user_id=user.id, name="Main", description="day to day", currency="cad"
    )

    assert (updated.name, updated.description, updated.currency) == ("Main", "day to day", "CAD")
    assert balance_of(acct) == Decimal("15.00")


def test_list_accounts_is_scoped_and_ordered(account_factory, account_repo, user, other_user):
    first = account_factory(name="First")
    second = account_factory(name="Second")
    account_factory(name="Not mine", owner=other_user)

    listed = accounts.list_accounts(account_repo, user_id=user.id)

    assert [a.id for a in listed] == [first.id, second.id]


def test_close_missing_account(account_repo, user):
    with pytest.raises(NotFoundError):
        accounts.close_account(account_repo, 404, user_id=user.id)


def test_total_balance(account_factory, account_repo, user):
    account_factory(name="A", initial_balance="10.10")
    account_factory(name="B", initial_balance="-0.10")

    assert account_repo.total_balance(user_id=user.id) == Decimal("10.00")


# -- categories ---------------------------------------------------------------


def test_create_category_defaults(category_factory):
    cat = category_factory(name=" Rent ", category_type="EXPENSE")

    assert cat.name == "Rent"
    assert cat.category_type == "expense"
    assert cat.color == DEFAULT_CATEGORY_COLOR


def test_category_color_is_validated(category_factory):
    assert category_factory(color="#ABCDEF").color == "#abcdef"
    with pytest.raises(ValidationError) as excinfo:
        category_factory(color="red")
    assert excinfo.value.field == "color"


def test_category_type_is_closed_set(category_factory):
    with pytest.raises(ValidationError):
        category_factory(category_type="transfer")


def test_list_categories_by_type(category_factory, category_repo, user):
    category_factory(name="Salary", category_type="income")
    category_factory(name="Bonus", category_type="income")
    category_factory(name="Food", category_type="expense")

    income = categories.list_categories(category_repo, user_id=user.id, category_type="income")
    everything = categories.list_categories(category_repo, user_id=user.id)

    assert [c.name for c in income] == ["Bonus", "Salary"]
    assert len(everything) == 3


def test_category_type_change_blocked_while_in_use(
    account_factory, category_factory, transaction_factory, category_repo, user
):
    food = category_factory(name="Food")
    transaction_factory(account_factory(), category=food)

    with pytest.raises(ValidationError) as excinfo:
        categories.update_category(category_repo, food.id, user_id=user.id, category_type="income")
    assert excinfo.value.field == "category_type"

    renamed = categories.update_category(category_repo, food.id, user_id=user.id, name="Meals")
    assert renamed.name == "Meals"
    assert renamed.category_type == "expense"


def test_unused_category_can_change_type(category_factory, category_repo, user):
    gift = category_factory(name="Gifts")
    updated = categories.update_category(category_repo, gift.id, user_id=user.id, category_type="income")
    assert updated.category_type == "income"


def test_delete_category_uncategorizes_transactions(
    account_factory, category_factory, transaction_factory, category_repo, transaction_repo, user, balance_of
):
    acct = account_factory(initial_balance="50.00")
    food = category_factory(name="Food")
    txn = transaction_factory(acct, amount="5.00", category=food)

    cleared = categories.delete_category(category_repo, food.id, user_id=user.id)

    assert cleared == 1
    stored = transaction_repo.get_by_id(txn.id, user_id=user.id)
    assert stored is not None
    assert stored.category_id is None
    assert balance_of(acct) == Decimal("45.00")
    assert category_repo.get_by_id(food.id, user_id=user.id) is None


def test_clearing_category_on_edit(account_factory, category_factory, transaction_factory, transaction_repo, user):
    food = category_factory(name="Food")
    txn = transaction_factory(account_factory(), category=food)

    updated = ledger_service.edit_transaction(transaction_repo, txn.id, user_id=user.id, category_id=None)

    assert updated.category_id is None


def test_account_repository_rejects_missing_initial_balance(account_repo, user):
    with pytest.raises(ValidationError) as excinfo:
        account_repo.create(Account(name="Bare", initial_balance=None), user_id=user.id)
    assert excinfo.value.field == "initial_balance"
    assert account_repo.list_all(user_id=user.id) == []


def test_account_repository_update_rejects_missing_initial_balance(account_factory, account_repo, user, balance_of):
    acct = account_factory(initial_balance="8.00")
    changed = account_repo.get_by_id(acct.id, user_id=user.id)
    changed.initial_balance = None

    with pytest.raises(ValidationError):
        account_repo.update(changed, user_id=user.id)
    assert balance_of(acct) == Decimal("8.00")
