"""Transaction model for user expenses."""
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, utc_now
from models.category import Category

if TYPE_CHECKING:
    from models.user import User


class Transaction(Base):
    """
    Transaction model - a single expense owned by a user.

    Always references exactly one category; the category is loaded together with the
    transaction since every read path renders it.
    """

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_user_id_date", "user_id", "date"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    description: Mapped[str] = mapped_column(String(500))
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    is_ai_identified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        comment="True when the category came from classification rather than the fallback",
    )
    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), index=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    user: Mapped["User"] = relationship(back_populates="transactions")
    category: Mapped[Category] = relationship(lazy="selectin")
