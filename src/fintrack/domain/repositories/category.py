"""Category repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.category import Category


class CategoryRepository(Protocol):
    """Repository for managing category entities."""

    def get_by_id(self, category_id: int, *, user_id: int) -> Optional[Category]:
        """Retrieve a category by ID."""
        ...

    def list_all(self, *, user_id: int) -> list[Category]:
        """List all categories."""
        ...

    def list_by_type(self, category_type: str, *, user_id: int) -> list[Category]:
        """List categories filtered by type (income/expense)."""
        ...

    def create(self, category: Category, *, user_id: int) -> Category:
        """Create a new category."""
        ...

    def update(self, category: Category, *, user_id: int) -> Category:
        """Update an existing category."""
        ...

    def delete(self, category_id: int, *, user_id: int) -> int:
        """Delete a category by ID."""
        ...
