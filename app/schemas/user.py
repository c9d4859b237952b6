"""User info and admin schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.schemas.common import CamelModel


class UserInfoResponse(CamelModel):
    id: UUID
    email: str
    tier: str
    tier_name: str
    is_admin: bool
    last_execution_at: datetime | None
    cooldown_seconds: int
    retention_days: int
    can_execute: bool
    retry_after: datetime | None = None
    retry_after_text: str | None = None


class AdminUserResponse(CamelModel):
    id: UUID
    email: str
    tier: str
    is_admin: bool
    last_execution_at: datetime | None
    created_at: datetime


class AdminUserList(CamelModel):
    items: list[AdminUserResponse]
    total: int


class UpdateTierRequest(CamelModel):
    tier: str = Field(..., pattern="^(free|paid_tier_1|admin)$")
