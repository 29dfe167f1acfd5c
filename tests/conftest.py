"""Pytest configuration and shared fixtures for FinTrack tests.

Every test gets its own SQLite file under ``tmp_path`` with the production
pragmas applied, so foreign keys, cascades and set-null rules behave exactly as
they do in the application.
"""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest
from sqlmodel import select

from fintrack.config import TestingConfig
from fintrack.infra.database import create_db_engine, create_session_factory, init_database
from fintrack.infra.repositories import (
    SQLModelAccountRepository,
    SQLModelCategoryRepository,
    SQLModelProfileRepository,
    SQLModelTransactionRepository,
)
from fintrack.logging_config import ROOT_LOGGER_NAME
from fintrack.models import Account, Category, Transaction, User
from fintrack.services import accounts, auth, categories, ledger_service

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def config(tmp_path) -> TestingConfig:
    """Configuration rooted in a per-test data directory."""
    return TestingConfig(tmp_path / "instance")


@pytest.fixture
def db_engine(config):
    """Create an isolated SQLite database for each test.

    Yields:
        Engine: engine with foreign keys enabled and all tables created
    """
    engine = create_db_engine(config)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Factory returning commit-or-rollback session scopes, as repositories expect."""
    return create_session_factory(db_engine)


# =============================================================================
# Repositories
# =============================================================================


@pytest.fixture
def account_repo(session_factory) -> SQLModelAccountRepository:
    return SQLModelAccountRepository(session_factory)


@pytest.fixture
def category_repo(session_factory) -> SQLModelCategoryRepository:
    return SQLModelCategoryRepository(session_factory)


@pytest.fixture
def transaction_repo(session_factory) -> SQLModelTransactionRepository:
    return SQLModelTransactionRepository(session_factory)


@pytest.fixture
def profile_repo(session_factory) -> SQLModelProfileRepository:
    return SQLModelProfileRepository(session_factory)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def user_factory(session_factory):
    """Factory for signed-up users (profile included)."""

    def _create_user(username: str = "tester", password: str = "correct-horse") -> User:
        return auth.sign_up(username=username, password=password, session_factory=session_factory)

    return _create_user


@pytest.fixture
def user(user_factory) -> User:
    """Default owner for test data."""
    return user_factory()


@pytest.fixture
def other_user(user_factory) -> User:
    """A second owner, for isolation checks."""
    return user_factory("intruder")


@pytest.fixture
def account_factory(account_repo, user):
    """Factory for creating accounts through the account service."""

    def _create_account(
        name: str = "Checking",
        initial_balance: str = "0.00",
        currency: str | None = None,
        owner: User | None = None,
    ) -> Account:
        owner = owner or user
        return accounts.open_account(
            account_repo,
            user_id=owner.id,
            name=name,
            initial_balance=initial_balance,
            currency=currency,
        )

    return _create_account


@pytest.fixture
def category_factory(category_repo, user):
    """Factory for creating categories through the category service."""

    def _create_category(
        name: str = "Groceries",
        category_type: str = "expense",
        color: str | None = None,
        owner: User | None = None,
    ) -> Category:
        owner = owner or user
        return categories.create_category(
            category_repo,
            user_id=owner.id,
            name=name,
            category_type=category_type,
            color=color,
        )

    return _create_category


@pytest.fixture
def transaction_factory(transaction_repo, user):
    """Factory for recording transactions through the ledger service.

    Returns:
        Callable: records a transaction and returns the stored row
    """

    def _create_transaction(
        account: Account,
        txn_type: str = "expense",
        amount: str = "10.00",
        category: Category | None = None,
        description: str | None = None,
        occurred_on=None,
        owner: User | None = None,
    ) -> Transaction:
        owner = owner or user
        return ledger_service.record_transaction(
            transaction_repo,
            user_id=owner.id,
            account_id=account.id,
            txn_type=txn_type,
            amount=amount,
            category_id=category.id if category else None,
            description=description,
            occurred_on=occurred_on,
        )

    return _create_transaction


@pytest.fixture
def balance_of(session_factory):
    """Read an account's cached balance straight from the database."""

    def _balance(account: Account | int) -> Decimal:
        account_id = account if isinstance(account, int) else account.id
        with session_factory() as session:
            value = session.exec(
                select(Account.current_balance).where(Account.id == account_id)
            ).one()
        return Decimal(value).quantize(Decimal("0.01"))

    return _balance


@pytest.fixture
def transaction_count(session_factory):
    def _count(account: Account | None = None) -> int:
        with session_factory() as session:
            statement = select(Transaction.id)
            if account is not None:
                statement = statement.where(Transaction.account_id == account.id)
            return len(session.exec(statement).all())

    return _count


@pytest.fixture(autouse=True)
def _reset_fintrack_logging():
    """Drop handlers installed by ``setup_logging`` so tests do not leak them."""
    yield
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
