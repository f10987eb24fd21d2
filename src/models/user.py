"""User model for registered accounts."""
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.transaction import Transaction


class User(Base, TimestampMixin):
    """
    User model - email/password account that owns transactions.

    Transactions are removed explicitly by the account service before the user row
    is deleted; the relationship carries no ORM cascade.
    """

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(
        String(255),
        comment="bcrypt hash of the user's password",
    )

    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="user",
        passive_deletes=True,
    )
