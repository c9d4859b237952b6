"""Current user info and admin tier management."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, require_admin
from app.core.exceptions import NotFoundError
from app.core.tier_limits import TIER_NAMES, UserTier, can_execute, format_retry_after, get_tier_limits
from app.db.postgres import get_db
from app.models.user import User
from app.schemas.user import AdminUserList, AdminUserResponse, UpdateTierRequest, UserInfoResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


@router.get("/user/info", response_model=UserInfoResponse)
async def user_info(user: User = Depends(get_current_user)):
    limits = get_tier_limits(user.tier)
    check = can_execute(user)
    try:
        tier_name = TIER_NAMES[UserTier(user.tier)]
    except ValueError:
        tier_name = user.tier

    return UserInfoResponse(
        id=user.id,
        email=user.email,
        tier=user.tier,
        tier_name=tier_name,
        is_admin=user.is_admin,
        last_execution_at=user.last_execution_at,
        cooldown_seconds=int(limits.cooldown.total_seconds()),
        retention_days=limits.retention_days,
        can_execute=check.allowed,
        retry_after=check.retry_after,
        retry_after_text=format_retry_after(check.retry_after) if check.retry_after else None,
    )


@router.get("/admin/users", response_model=AdminUserList)
async def list_users(
    offset: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    count_result = await db.execute(select(func.count(User.id)))
    total = count_result.scalar() or 0

    result = await db.execute(select(User).order_by(User.created_at.desc()).offset(offset).limit(limit))
    return AdminUserList(
        items=[AdminUserResponse.model_validate(u) for u in result.scalars().all()],
        total=total,
    )


@router.patch("/admin/users/{user_id}", response_model=AdminUserResponse)
async def update_user_tier(
    user_id: UUID,
    body: UpdateTierRequest,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    target = await db.get(User, user_id)
    if not target:
        raise NotFoundError("User not found")

    logger.info("Admin %s changed tier of user %s: %s -> %s", admin.id, target.id, target.tier, body.tier)
    target.tier = body.tier
    await db.flush()
    await db.refresh(target)
    return target
