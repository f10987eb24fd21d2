"""Service layer for the shared category reference set."""
import logging
import time
from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.cache import TTLCache
from models.category import DEFAULT_CATEGORIES, OTHER_CATEGORY, Category

logger = logging.getLogger(__name__)

DEFAULT_ICON = dict(DEFAULT_CATEGORIES)[OTHER_CATEGORY]


class CategoryCache:
    """
    Process-wide snapshot of category names.

    Categories change only when seeded or edited, so classification and receipt
    scanning read names from here instead of querying on every call.
    """

    _KEY = "names"

    def __init__(
        self,
        ttl_seconds: float = 600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache: TTLCache[str, list[str]] = TTLCache(
            ttl_seconds, name="category_cache", clock=clock,
        )

    async def get_names(self, db: AsyncSession) -> list[str]:
        """Return all category names, refetching when stale or invalidated."""

        async def load() -> list[str]:
            result = await db.execute(select(Category.name).order_by(Category.id))
            return list(result.scalars().all())

        names = await self._cache.get_or_load(self._KEY, load)
        return list(names)

    def invalidate(self) -> None:
        """Force the next read to refetch (call after any category change)."""
        self._cache.invalidate(self._KEY)


async def list_categories(db: AsyncSession) -> list[Category]:
    """Return every category ordered by id."""
    result = await db.execute(select(Category).order_by(Category.id))
    return list(result.scalars().all())


async def get_category_by_name(db: AsyncSession, name: str) -> Category | None:
    """Look up a category by exact name."""
    result = await db.execute(select(Category).where(Category.name == name))
    return result.scalar_one_or_none()


async def resolve_category(
    db: AsyncSession,
    name: str | None,
    category_cache: CategoryCache | None = None,
) -> Category:
    """
    Return the named category, falling back to "Other".

    If "Other" itself is missing (unseeded database) it is created, so every
    transaction can reference an existing category.
    """
    category = None
    if name:
        category = await get_category_by_name(db, name)
    if category is not None:
        return category

    category = await get_category_by_name(db, OTHER_CATEGORY)
    if category is None:
        logger.warning("default_category_missing name=%s creating", OTHER_CATEGORY)
        category = Category(name=OTHER_CATEGORY, icon=DEFAULT_ICON)
        db.add(category)
        await db.flush()
        if category_cache is not None:
            category_cache.invalidate()
    return category


async def ensure_default_categories(
    db: AsyncSession,
    category_cache: CategoryCache | None = None,
) -> int:
    """
    Upsert the default categories.

    Idempotent: existing rows keep their id and get their icon refreshed.

    Returns:
        Number of categories created.
    """
    result = await db.execute(select(Category))
    existing = {category.name: category for category in result.scalars().all()}

    created = 0
    for name, icon in DEFAULT_CATEGORIES:
        category = existing.get(name)
        if category is None:
            db.add(Category(name=name, icon=icon))
            created += 1
        elif category.icon != icon:
            category.icon = icon
    await db.flush()

    if category_cache is not None:
        category_cache.invalidate()
    logger.info("categories_seeded created=%s total=%s", created, len(DEFAULT_CATEGORIES))
    return created
