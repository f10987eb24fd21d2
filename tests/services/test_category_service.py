"""Tests for category seeding and resolution."""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.category import DEFAULT_CATEGORIES, OTHER_CATEGORY, Category
from services.category_service import (
    CategoryCache,
    ensure_default_categories,
    list_categories,
    resolve_category,
)


async def _count(db_session: AsyncSession) -> int:
    return (await db_session.execute(select(func.count()).select_from(Category))).scalar_one()


async def test__ensure_default_categories__is_idempotent(db_session: AsyncSession) -> None:
    created_first = await ensure_default_categories(db_session)
    created_second = await ensure_default_categories(db_session)

    assert created_first == len(DEFAULT_CATEGORIES)
    assert created_second == 0
    assert await _count(db_session) == len(DEFAULT_CATEGORIES)


async def test__ensure_default_categories__refreshes_icons_and_keeps_ids(
    db_session: AsyncSession,
) -> None:
    db_session.add(Category(name="Food", icon="old"))
    await db_session.flush()
    food_id = (await list_categories(db_session))[0].id

    await ensure_default_categories(db_session)

    food = (await list_categories(db_session))[0]
    assert food.id == food_id
    assert food.icon == dict(DEFAULT_CATEGORIES)["Food"]


async def test__ensure_default_categories__invalidates_cache(db_session: AsyncSession) -> None:
    cache = CategoryCache()
    assert await cache.get_names(db_session) == []

    await ensure_default_categories(db_session, cache)

    assert len(await cache.get_names(db_session)) == len(DEFAULT_CATEGORIES)


async def test__resolve_category__known_name(
    db_session: AsyncSession, seeded_categories: list[Category],  # noqa: ARG001
) -> None:
    category = await resolve_category(db_session, "Health")

    assert category.name == "Health"


async def test__resolve_category__unknown_or_missing_name_is_other(
    db_session: AsyncSession, seeded_categories: list[Category],  # noqa: ARG001
) -> None:
    assert (await resolve_category(db_session, "Lottery")).name == OTHER_CATEGORY
    assert (await resolve_category(db_session, None)).name == OTHER_CATEGORY


async def test__resolve_category__creates_other_when_unseeded(
    db_session: AsyncSession,
) -> None:
    category = await resolve_category(db_session, "Food")

    assert category.name == OTHER_CATEGORY
    assert category.id is not None
    assert await _count(db_session) == 1
