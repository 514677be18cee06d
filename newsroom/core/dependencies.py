import logging
import uuid
from datetime import datetime, timezone

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.exceptions import ForbiddenError, UnauthorizedError
from newsroom.core.permissions import can_perform_action, has_role_at_least
from newsroom.core.security import decode_token
from newsroom.db.session import get_db
from newsroom.models.user import User, UserRole

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer()

# Map request paths to human-readable actions
_ACTION_MAP = [
    ("GET", "/bulletins", "Viewed rundowns"),
    ("POST", "/bulletins", "Edited rundown"),
    ("PUT", "/rows/reorder", "Reordered rundown"),
    ("PATCH", "/rows/", "Edited story"),
    ("DELETE", "/rows/", "Deleted story"),
    ("GET", "/pools", "Browsed story pools"),
    ("POST", "/pool-stories", "Assigned pool story"),
    ("GET", "/trash", "Viewed trash"),
    ("GET", "/users", "Viewed users"),
]


def _classify_action(method: str, path: str) -> str:
    """Classify a request into a human-readable action."""
    for m, prefix, label in _ACTION_MAP:
        if method == m and prefix in path:
            return label
    if method == "GET":
        return "Browsed newsroom"
    if method in ("POST", "PUT", "PATCH", "DELETE"):
        return "Made changes"
    return "Active"


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    try:
        payload = decode_token(credentials.credentials)
    except ValueError:
        raise UnauthorizedError()

    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")

    user_id = payload.get("sub")
    try:
        user_uuid = uuid.UUID(user_id)
    except (ValueError, TypeError):
        raise UnauthorizedError()

    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise UnauthorizedError("User not found or inactive")

    # Track activity, throttled to avoid a DB write on every request (max once per 5s)
    now = datetime.now(timezone.utc)
    last_seen = user.last_seen_at
    if last_seen is not None and last_seen.tzinfo is None:
        last_seen = last_seen.replace(tzinfo=timezone.utc)
    if last_seen is None or (now - last_seen).total_seconds() > 5:
        user.last_seen_at = now
        user.last_action = _classify_action(request.method, request.url.path)

    return user


def require_role(minimum: UserRole):
    """Dependency factory: the current user must rank at least ``minimum``."""

    async def _require(user: User = Depends(get_current_user)) -> User:
        if not has_role_at_least(user, minimum):
            raise ForbiddenError(f"Requires {minimum.value} or above")
        return user

    return _require


def require_action(action: str):
    """Dependency factory keyed on the permission table in ``core.permissions``."""

    async def _require(user: User = Depends(get_current_user)) -> User:
        if not can_perform_action(user, action):
            raise ForbiddenError(f"Not allowed to {action.replace('_', ' ')}")
        return user

    return _require


require_admin = require_role(UserRole.ADMIN)
require_producer = require_role(UserRole.PRODUCER)
require_editor = require_role(UserRole.EDITOR)
