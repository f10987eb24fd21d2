"""Pydantic schemas for transaction endpoints."""
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from pydantic import field_validator

from schemas.base import CamelModel
from schemas.category import CategoryResponse

MAX_DESCRIPTION_LENGTH = 500
AMOUNT_INVALID = "Amount must be a positive number."


class TransactionCreate(CamelModel):
    """Schema for manually entering a transaction."""

    amount: Decimal
    description: str
    date: datetime | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def amount_must_be_positive(cls, value: Any) -> Decimal:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError(AMOUNT_INVALID) from None
        if isinstance(value, bool) or not amount.is_finite() or amount <= 0:
            raise ValueError(AMOUNT_INVALID)
        return amount

    @field_validator("description")
    @classmethod
    def description_must_not_be_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description is required.")
        if len(value) > MAX_DESCRIPTION_LENGTH:
            raise ValueError(
                f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters.",
            )
        return value


class TransactionResponse(CamelModel):
    """A stored transaction with its category."""

    id: UUID
    amount: Decimal
    description: str
    date: datetime
    is_ai_identified: bool
    user_id: UUID
    category_id: int
    category: CategoryResponse
    created_at: datetime


class TransactionCreateResponse(CamelModel):
    """Wrapper for a newly created transaction."""

    transaction: TransactionResponse


class TransactionListResponse(CamelModel):
    """All of a user's transactions, newest first."""

    count: int
    transactions: list[TransactionResponse]


class ClearTransactionsResponse(CamelModel):
    """Result of deleting every transaction."""

    message: str
    count: int
