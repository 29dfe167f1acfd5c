"""Repository protocol definitions for domain layer."""

from .account import AccountRepository
from .category import CategoryRepository
from .profile import ProfileRepository
from .transaction import TransactionRepository

__all__ = [
    "AccountRepository",
    "CategoryRepository",
    "ProfileRepository",
    "TransactionRepository",
]
