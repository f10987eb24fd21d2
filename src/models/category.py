"""Category model - small reference set shared by all users."""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base

OTHER_CATEGORY = "Other"

# Seeded on startup; "Other" is the fallback for unrecognized classifications.
DEFAULT_CATEGORIES: list[tuple[str, str]] = [
    ("Food", "\U0001F354"),
    ("Transport", "\U0001F697"),
    ("Entertainment", "\U0001F3AC"),
    ("Rent", "\U0001F3E0"),
    ("Utilities", "\U0001F4A1"),
    ("Shopping", "\U0001F6CD\uFE0F"),
    ("Health", "\U0001F3E5"),
    ("Education", "\U0001F4DA"),
    ("Subscriptions", "\U0001F4F1"),
    (OTHER_CATEGORY, "\U0001F4C1"),
]


class Category(Base):
    """Category model - unique name plus an icon glyph."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    icon: Mapped[str] = mapped_column(String(16), default="")
