from uuid import UUID

import jwt
from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.backends.base import BackendInvoker
from app.backends.openrouter import OpenRouterInvoker
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.core.security import decode_token
from app.db.postgres import get_db
from app.models.user import User


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    authorization: str | None = Header(None, description="Bearer <token>"),
) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Invalid authorization header")

    token = authorization[7:]
    try:
        payload = decode_token(token)
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid or expired token")

    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token payload")

    try:
        uid = UUID(user_id)
    except ValueError:
        raise UnauthorizedError("Invalid token payload")

    result = await db.execute(select(User).where(User.id == uid))
    user = result.scalar_one_or_none()
    if not user:
        raise UnauthorizedError("User not found")

    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Allow only admins (flag or admin tier)."""
    if not (user.is_admin or user.tier == "admin"):
        raise ForbiddenError("Admin access required")
    return user


def get_backend_invoker() -> BackendInvoker:
    """Backend used by the execute endpoint. Overridden in tests."""
    return OpenRouterInvoker()
