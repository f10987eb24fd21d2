"""Service layer for user accounts."""
import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.passwords import hash_password, verify_password
from models.transaction import Transaction
from models.user import User
from services.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Look up a user by email."""
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: UUID) -> User | None:
    """Look up a user by id."""
    return await db.get(User, user_id)


async def create_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Register a new account.

    Raises:
        EmailAlreadyRegisteredError: The email is taken (including a concurrent
            registration that won the race to the unique constraint).

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    if await get_user_by_email(db, email) is not None:
        raise EmailAlreadyRegisteredError(email)

    user = User(email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise EmailAlreadyRegisteredError(email) from e

    logger.info("user_registered user_id=%s", user.id)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """
    Return the user whose credentials match.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password (indistinguishable).
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise InvalidCredentialsError
    return user


async def delete_account(db: AsyncSession, user_id: UUID) -> int:
    """
    Delete a user and all of their transactions.

    Transactions are removed explicitly first rather than relying on a foreign-key
    cascade.

    Returns:
        Number of transactions deleted.

    Raises:
        UserNotFoundError: No user with this id.
    """
    user = await get_user(db, user_id)
    if user is None:
        raise UserNotFoundError(str(user_id))

    result = await db.execute(delete(Transaction).where(Transaction.user_id == user_id))
    await db.delete(user)
    await db.flush()
    logger.info("user_deleted user_id=%s transactions=%s", user_id, result.rowcount)
    return result.rowcount
