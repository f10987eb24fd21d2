"""SQLAlchemy models."""
from models.base import Base, TimestampMixin
from models.category import DEFAULT_CATEGORIES, OTHER_CATEGORY, Category
from models.user import User
from models.transaction import Transaction

__all__ = [
    "DEFAULT_CATEGORIES",
    "OTHER_CATEGORY",
    "Base",
    "Category",
    "TimestampMixin",
    "Transaction",
    "User",
]
