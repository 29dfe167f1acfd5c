"""Account repository protocol."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from ...models.account import Account


class AccountRepository(Protocol):
    """Repository for managing account entities.

    ``current_balance`` cannot be set through this interface.
    """

    def get_by_id(self, account_id: int, *, user_id: int) -> Optional[Account]:
        """Retrieve an account by ID."""
        ...

    def list_all(self, *, user_id: int) -> list[Account]:
        """List accounts in creation order."""
        ...

    def create(self, account: Account, *, user_id: int) -> Account:
        """Create a new account."""
        ...

    def update(self, account: Account, *, user_id: int) -> Account:
        """Update an existing account's descriptive fields and initial balance."""
        ...

    def delete(self, account_id: int, *, user_id: int) -> int:
        """Delete an account and its transactions."""
        ...

    def total_balance(self, *, user_id: int) -> Decimal:
        """Sum of current balances."""
        ...
