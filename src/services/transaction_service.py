"""Service layer for transaction CRUD."""
import logging
from collections.abc import Iterable
from datetime import UTC, datetime, time
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.cache import invalidate_after_commit
from models.category import OTHER_CATEGORY
from models.transaction import Transaction
from schemas.receipt import ReceiptItem
from schemas.transaction import TransactionCreate
from services import category_service
from services.categorizer import classify_transaction
from services.category_service import CategoryCache
from services.exceptions import (
    NoValidTransactionsError,
    TransactionForbiddenError,
    TransactionNotFoundError,
)
from services.llm_client import CompletionClient
from services.summary_service import SummaryCache

logger = logging.getLogger(__name__)


def _invalidate_summary(db: AsyncSession, summary_cache: SummaryCache, user_id: UUID) -> None:
    """Drop the user's summary now and again once the write commits."""
    summary_cache.invalidate(user_id)
    invalidate_after_commit(db, lambda: summary_cache.invalidate(user_id))


async def create_transaction(
    db: AsyncSession,
    user_id: UUID,
    data: TransactionCreate,
    *,
    llm: CompletionClient,
    category_cache: CategoryCache,
    summary_cache: SummaryCache,
) -> Transaction:
    """
    Classify and store a manually entered transaction.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    category_names = await category_cache.get_names(db)
    category_name = await classify_transaction(data.description, category_names, llm)
    category = await category_service.resolve_category(db, category_name, category_cache)

    transaction = Transaction(
        amount=data.amount,
        description=data.description,
        date=data.date or datetime.now(UTC),
        is_ai_identified=category.name != OTHER_CATEGORY,
        user_id=user_id,
        category=category,
    )
    db.add(transaction)
    await db.flush()

    _invalidate_summary(db, summary_cache, user_id)
    logger.info(
        "transaction_created user_id=%s category=%s", user_id, category.name,
    )
    return transaction


async def get_transactions(db: AsyncSession, user_id: UUID) -> list[Transaction]:
    """Return all of the user's transactions, newest date first."""
    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc(), Transaction.created_at.desc()),
    )
    return list(result.scalars().all())


async def delete_transaction(
    db: AsyncSession,
    user_id: UUID,
    transaction_id: UUID,
    *,
    summary_cache: SummaryCache,
) -> None:
    """
    Delete one transaction owned by the user.

    Raises:
        TransactionNotFoundError: No transaction with this id.
        TransactionForbiddenError: The transaction belongs to another user.
    """
    transaction = await db.get(Transaction, transaction_id)
    if transaction is None:
        raise TransactionNotFoundError
    if transaction.user_id != user_id:
        logger.warning(
            "transaction_delete_forbidden user_id=%s transaction_id=%s",
            user_id,
            transaction_id,
        )
        raise TransactionForbiddenError

    await db.delete(transaction)
    await db.flush()
    _invalidate_summary(db, summary_cache, user_id)


async def clear_transactions(
    db: AsyncSession,
    user_id: UUID,
    *,
    summary_cache: SummaryCache,
) -> int:
    """
    Delete every transaction the user owns.

    Returns:
        Number of transactions deleted.
    """
    result = await db.execute(delete(Transaction).where(Transaction.user_id == user_id))
    _invalidate_summary(db, summary_cache, user_id)
    logger.info("transactions_cleared user_id=%s count=%s", user_id, result.rowcount)
    return result.rowcount


async def save_scanned_transactions(
    db: AsyncSession,
    user_id: UUID,
    items: Iterable[ReceiptItem],
    *,
    category_cache: CategoryCache,
    summary_cache: SummaryCache,
) -> list[Transaction]:
    """
    Store transactions the user confirmed after a receipt scan.

    Items without a positive amount or a non-blank description are skipped. The
    category named on each item is used if it exists, otherwise "Other".

    Raises:
        NoValidTransactionsError: Nothing was saved.
    """
    saved = []
    for item in items:
        description = (item.description or "").strip()
        if item.amount is None or item.amount <= 0 or not description:
            continue

        category = await category_service.resolve_category(
            db, item.category or OTHER_CATEGORY, category_cache,
        )
        date = (
            datetime.combine(item.date, time.min, tzinfo=UTC)
            if item.date
            else datetime.now(UTC)
        )
        transaction = Transaction(
            amount=item.amount,
            description=description,
            date=date,
            is_ai_identified=True,
            user_id=user_id,
            category=category,
        )
        db.add(transaction)
        saved.append(transaction)

    if not saved:
        raise NoValidTransactionsError

    await db.flush()
    _invalidate_summary(db, summary_cache, user_id)
    logger.info("scanned_transactions_saved user_id=%s count=%s", user_id, len(saved))
    return saved
