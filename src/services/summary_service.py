"""Per-user spending summaries used as context for the coach chat."""
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.cache import TTLCache
from models.category import OTHER_CATEGORY
from models.transaction import Transaction

# Only the most recent transactions feed the summary
SUMMARY_TRANSACTION_LIMIT = 30
CURRENCY_SYMBOL = "₹"


@dataclass(frozen=True)
class SpendingSummary:
    """Aggregates over a user's recent transactions."""

    transaction_count: int = 0
    total: Decimal = Decimal("0")
    monthly_total: Decimal = Decimal("0")
    monthly_count: int = 0
    # (category name, amount) pairs, largest first
    by_category: list[tuple[str, Decimal]] = field(default_factory=list)

    def to_prompt(self) -> str:
        """Compact one-line rendering for the LLM system prompt."""
        if self.transaction_count == 0:
            return "No transactions yet."
        breakdown = ", ".join(
            f"{name}:{CURRENCY_SYMBOL}{_whole(amount)}" for name, amount in self.by_category
        )
        return (
            f"Txns:{self.transaction_count} | "
            f"Total:{CURRENCY_SYMBOL}{_whole(self.total)} | "
            f"This month:{CURRENCY_SYMBOL}{_whole(self.monthly_total)}"
            f"({self.monthly_count} txns) | "
            f"By category: {breakdown}"
        )


def _whole(amount: Decimal) -> int:
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_spending_summary(
    transactions: Iterable[Transaction],
    now: datetime | None = None,
) -> SpendingSummary:
    """Aggregate totals, current-month totals and a per-category breakdown."""
    now = now or datetime.now(UTC)
    items = list(transactions)
    if not items:
        return SpendingSummary()

    total = Decimal("0")
    monthly_total = Decimal("0")
    monthly_count = 0
    per_category: dict[str, Decimal] = {}
    for txn in items:
        amount = Decimal(txn.amount)
        total += amount
        name = txn.category.name if txn.category else OTHER_CATEGORY
        per_category[name] = per_category.get(name, Decimal("0")) + amount
        if txn.date.year == now.year and txn.date.month == now.month:
            monthly_total += amount
            monthly_count += 1

    by_category = sorted(per_category.items(), key=lambda item: item[1], reverse=True)
    return SpendingSummary(
        transaction_count=len(items),
        total=total,
        monthly_total=monthly_total,
        monthly_count=monthly_count,
        by_category=by_category,
    )


async def load_spending_summary(db: AsyncSession, user_id: UUID) -> SpendingSummary:
    """Query the user's recent transactions and summarize them."""
    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc())
        .limit(SUMMARY_TRANSACTION_LIMIT),
    )
    return build_spending_summary(result.scalars().all())


class SummaryCache:
    """
    Short-lived per-user cache of spending summaries.

    Every transaction write for a user must call `invalidate(user_id)`, so a summary
    is never older than that user's most recent write while repeated chat turns
    within the TTL reuse one query.
    """

    def __init__(
        self,
        ttl_seconds: float = 120,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache: TTLCache[UUID, SpendingSummary] = TTLCache(
            ttl_seconds, name="summary_cache", clock=clock,
        )

    async def get_summary(self, db: AsyncSession, user_id: UUID) -> SpendingSummary:
        """Return the user's summary, refetching when stale or invalidated."""
        return await self._cache.get_or_load(
            user_id, lambda: load_spending_summary(db, user_id),
        )

    def invalidate(self, user_id: UUID) -> None:
        """Drop only this user's summary."""
        self._cache.invalidate(user_id)
