"""Transaction repository protocol."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol

from ...models.transaction import Transaction


class TransactionRepository(Protocol):
    """Repository for managing transaction entities.

    Implementations must apply the balance maintainer in the same database
    transaction as ``create``, ``update`` and ``delete``.
    """

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        ...

    def list_all(self, *, user_id: int, limit: int = 100, offset: int = 0) -> list[Transaction]:
        """List transactions with pagination."""
        ...

    def filter_by_account(self, account_id: int, *, user_id: int) -> list[Transaction]:
        """Get all transactions for a specific account."""
        ...

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
        """Advanced search with multiple filters."""
        ...

    def create(self, transaction: Transaction, *, user_id: int) -> Transaction:
        """Create a new transaction."""
        ...

    def update(
        self, transaction: Transaction, *, user_id: int, expected_version: Optional[int] = None
    ) -> Transaction:
        """Update an existing transaction."""
        ...

    def delete(
        self, transaction_id: int, *, user_id: int, expected_version: Optional[int] = None
    ) -> Transaction:
        """Delete a transaction by ID."""
        ...

    def sum_by_type(self, *, user_id: int, account_id: Optional[int] = None) -> dict[str, Decimal]:
        """Income and expense totals."""
        ...
