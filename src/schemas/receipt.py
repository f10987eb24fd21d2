"""Pydantic schemas for receipt scanning endpoints."""
from datetime import date as date_type
from decimal import Decimal
from typing import Any, Literal

from pydantic import model_validator

from schemas.base import CamelModel
from schemas.transaction import TransactionResponse


class ExtractedTransaction(CamelModel):
    """One transaction read off a receipt, for the user to confirm or edit."""

    amount: Decimal
    description: str
    date: str | None = None
    category: str
    type: Literal["debit", "credit"] = "debit"


class ScanResponse(CamelModel):
    """Everything extracted from one image."""

    extracted: list[ExtractedTransaction]


class ReceiptItem(CamelModel):
    """
    A confirmed transaction from a scan.

    Fields are optional because incomplete items are skipped rather than rejected.
    """

    amount: Decimal | None = None
    description: str | None = None
    date: date_type | None = None
    category: str | None = None


class ReceiptSaveRequest(CamelModel):
    """Either `{"transactions": [...]}` or a single item at the top level."""

    transactions: list[ReceiptItem]

    @model_validator(mode="before")
    @classmethod
    def wrap_single_item(cls, data: Any) -> Any:
        if isinstance(data, dict) and "transactions" not in data:
            return {"transactions": [data]}
        return data


class ReceiptSaveResponse(CamelModel):
    """Saved transactions; `transaction` repeats the first for single-item callers."""

    transactions: list[TransactionResponse]
    transaction: TransactionResponse
