"""SQLModel table exports."""

from .account import Account
from .category import Category
from .profile import Profile
from .transaction import Transaction
from .user import User

__all__ = [
    "Account",
    "Category",
    "Profile",
    "Transaction",
    "User",
]
