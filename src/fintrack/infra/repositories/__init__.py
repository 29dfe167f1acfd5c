"""Concrete repository implementations using SQLModel."""

from .account import SQLModelAccountRepository
from .category import SQLModelCategoryRepository
from .profile import SQLModelProfileRepository
from .transaction import SQLModelTransactionRepository

__all__ = [
    "SQLModelAccountRepository",
    "SQLModelCategoryRepository",
    "SQLModelProfileRepository",
    "SQLModelTransactionRepository",
]
