from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_tracker.core.enums import EntityType
from fuel_tracker.core.errors import UsernameTakenError
from fuel_tracker.core.security import hash_password, verify_password
from fuel_tracker.models.user import User
from fuel_tracker.services.audit import audit_log


logger = logging.getLogger(__name__)


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    return (await session.execute(select(User).where(User.username == username))).scalar_one_or_none()


async def register_user(session: AsyncSession, *, username: str, password: str) -> User:
    if await get_user_by_username(session, username) is not None:
        raise UsernameTakenError("Username already exists")

    user = User(username=username, password_hash=hash_password(password))
    session.add(user)
    await session.flush()

    await audit_log(
        session,
        actor=username,
        entity_type=EntityType.USER,
        entity_id=user.id,
        action="register",
        after={"username": username},
    )
    logger.info("Registered user %s", username)
    return user


async def authenticate_user(session: AsyncSession, *, username: str, password: str) -> User | None:
    """Returns None for an unknown user or a wrong password; callers must not tell the two apart."""
    user = await get_user_by_username(session, username)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", username)
        return None
    return user
