"""Tests for the user account service."""
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.category import Category
from models.transaction import Transaction
from services import user_service
from services.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    UserNotFoundError,
)


async def test__create_user__stores_bcrypt_hash_not_password(db_session: AsyncSession) -> None:
    user = await user_service.create_user(db_session, "a@x.com", "secret1")

    assert user.id is not None
    assert user.password_hash != "secret1"
    assert user.password_hash.startswith("$2")
    assert user.created_at is not None


async def test__create_user__duplicate_email_raises(db_session: AsyncSession) -> None:
    await user_service.create_user(db_session, "a@x.com", "secret1")

    with pytest.raises(EmailAlreadyRegisteredError):
        await user_service.create_user(db_session, "a@x.com", "other-pass")


async def test__authenticate__matches_password(db_session: AsyncSession) -> None:
    created = await user_service.create_user(db_session, "a@x.com", "secret1")

    user = await user_service.authenticate(db_session, "a@x.com", "secret1")

    assert user.id == created.id


async def test__authenticate__wrong_password_and_unknown_email_look_the_same(
    db_session: AsyncSession,
) -> None:
    await user_service.create_user(db_session, "a@x.com", "secret1")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        await user_service.authenticate(db_session, "a@x.com", "wrongpass")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        await user_service.authenticate(db_session, "b@x.com", "secret1")

    assert str(wrong_password.value) == str(unknown_email.value)


async def test__delete_account__removes_user_and_their_transactions(
    db_session: AsyncSession, seeded_categories: list[Category],
) -> None:
    alice = await user_service.create_user(db_session, "alice@x.com", "secret1")
    bob = await user_service.create_user(db_session, "bob@x.com", "secret1")
    alice_id, bob_id = alice.id, bob.id
    for owner in (alice_id, alice_id, bob_id):
        db_session.add(
            Transaction(
                amount=Decimal("5"), description="Tea", user_id=owner,
                category=seeded_categories[0],
            ),
        )
    await db_session.flush()

    deleted = await user_service.delete_account(db_session, alice_id)

    assert deleted == 2
    assert await user_service.get_user(db_session, alice_id) is None
    remaining = (
        await db_session.execute(select(func.count()).select_from(Transaction))
    ).scalar_one()
    assert remaining == 1


async def test__delete_account__unknown_user_raises(db_session: AsyncSession) -> None:
    with pytest.raises(UserNotFoundError):
        await user_service.delete_account(db_session, uuid4())
