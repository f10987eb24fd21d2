"""Seed script for categories and a local demo account.

Usage:
    PYTHONPATH=src python scripts/seed_data.py categories
    PYTHONPATH=src python scripts/seed_data.py demo
    PYTHONPATH=src python scripts/seed_data.py demo --force
    PYTHONPATH=src python scripts/seed_data.py clear
"""

import argparse
import asyncio
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import get_settings
from core.passwords import hash_password
from models import Base, Transaction, User
from services.category_service import ensure_default_categories, resolve_category

DEMO_EMAIL = 'demo@finmind.local'
DEMO_PASSWORD = 'demo1234'

# (days ago, amount, description, category)
DEMO_TRANSACTIONS = [
    (0, '249.00', 'Zomato dinner order', 'Food'),
    (1, '180.50', 'Uber to office', 'Transport'),
    (2, '649.00', 'Netflix monthly plan', 'Subscriptions'),
    (3, '1299.00', 'Amazon headphones', 'Shopping'),
    (5, '15000.00', 'Flat rent for the month', 'Rent'),
    (6, '1120.00', 'Electricity bill', 'Utilities'),
    (8, '350.00', 'Apollo pharmacy', 'Health'),
    (10, '499.00', 'Udemy course on data analysis', 'Education'),
    (12, '420.00', 'PVR movie tickets', 'Entertainment'),
    (15, '75.00', 'Chai and samosa', 'Other'),
]


def _session_factory() -> tuple:
    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)
    return engine, async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def seed_categories() -> None:
    """Create the tables if needed and upsert the default categories."""
    engine, session_factory = _session_factory()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with session_factory() as session:
            created = await ensure_default_categories(session)
            await session.commit()
        print(f'Categories seeded ({created} created).')
    finally:
        await engine.dispose()


async def get_or_create_demo_user(session: AsyncSession) -> User:
    """Return the demo user, creating it if needed."""
    user = (await session.execute(
        select(User).where(User.email == DEMO_EMAIL),
    )).scalar_one_or_none()
    if user is None:
        user = User(email=DEMO_EMAIL, password_hash=hash_password(DEMO_PASSWORD))
        session.add(user)
        await session.flush()
    return user


async def create_transactions(session: AsyncSession, user: User) -> None:
    """Add the sample transactions for the demo user."""
    now = datetime.now(UTC)
    for days_ago, amount, description, category_name in DEMO_TRANSACTIONS:
        category = await resolve_category(session, category_name)
        session.add(Transaction(
            amount=Decimal(amount),
            description=description,
            date=now - timedelta(days=days_ago),
            is_ai_identified=category_name != 'Other',
            user_id=user.id,
            category=category,
        ))
    await session.flush()


async def populate_demo(force: bool = False) -> None:
    """Create the demo account with a month of sample spending."""
    await seed_categories()
    engine, session_factory = _session_factory()

    async with session_factory() as session:
        try:
            user = await get_or_create_demo_user(session)
            count = (await session.execute(
                select(func.count()).select_from(Transaction).where(Transaction.user_id == user.id),
            )).scalar()

            if count:
                if not force:
                    print(f'Demo data already exists ({count} transactions). Use --force to re-seed.')
                    return
                print('Existing demo data found, clearing first (--force)...')
                await session.execute(delete(Transaction).where(Transaction.user_id == user.id))

            await create_transactions(session, user)
            await session.commit()
            print(f'Demo account ready: {DEMO_EMAIL} / {DEMO_PASSWORD}')
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


async def clear() -> None:
    """Remove the demo user and its transactions."""
    engine, session_factory = _session_factory()

    async with session_factory() as session:
        try:
            user_ids = select(User.id).where(User.email == DEMO_EMAIL)
            await session.execute(delete(Transaction).where(Transaction.user_id.in_(user_ids)))
            await session.execute(delete(User).where(User.email == DEMO_EMAIL))
            await session.commit()
            print('Demo data cleared.')
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description='Seed the database.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('categories', help='Create tables and upsert default categories')
    demo_parser = subparsers.add_parser('demo', help='Create a demo account with sample data')
    demo_parser.add_argument(
        '--force', action='store_true',
        help='Replace existing demo transactions',
    )
    subparsers.add_parser('clear', help='Remove the demo account')

    args = parser.parse_args()

    if args.command == 'categories':
        asyncio.run(seed_categories())
        return

    if get_settings().is_production:
        print('ERROR: demo data must only be written to a development database.')
        raise SystemExit(1)
    if args.command == 'demo':
        asyncio.run(populate_demo(force=args.force))
    elif args.command == 'clear':
        asyncio.run(clear())


if __name__ == '__main__':
    main()
