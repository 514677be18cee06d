import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.exceptions import ConflictError, UnauthorizedError
from newsroom.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from newsroom.models.user import User, UserRole

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    user = await get_user_by_email(db, email)

    if not user or not verify_password(password, user.hashed_password):
        logger.info("Failed login for %s", email)
        raise UnauthorizedError("Invalid email or password")

    if not user.is_active:
        raise UnauthorizedError("Account is disabled")

    user.last_seen_at = datetime.now(timezone.utc)
    user.last_action = "login"
    return user


async def create_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    display_name: str | None = None,
    role: UserRole = UserRole.REPORTER,
    phone: str | None = None,
    desk_id: uuid.UUID | None = None,
) -> User:
    if await get_user_by_email(db, email):
        raise ConflictError("A user with this email already exists")

    user = User(
        email=email.lower(),
        hashed_password=hash_password(password),
        display_name=display_name,
        role=role,
        phone=phone,
        desk_id=desk_id,
    )
    db.add(user)
    await db.flush()
    logger.info("Created %s user %s", role.value, user.email)
    return user


def create_tokens(user: User) -> dict:
    access_token = create_access_token(
        subject=str(user.id),
        extra_claims={"role": user.role.value},
    )
    refresh_token = create_refresh_token(subject=str(user.id))
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
    }


async def refresh_access_token(db: AsyncSession, refresh_token: str) -> dict:
    try:
        payload = decode_token(refresh_token)
    except ValueError:
        raise UnauthorizedError("Invalid refresh token")

    if payload.get("type") != "refresh":
        raise UnauthorizedError("Invalid token type")

    user_id_str = payload.get("sub")
    try:
        user_id = uuid.UUID(user_id_str)
    except (ValueError, TypeError):
        raise UnauthorizedError("Invalid refresh token")
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise UnauthorizedError("User not found or inactive")

    return create_tokens(user)
