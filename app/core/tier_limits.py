"""Tier policy: execution cooldown and result retention per user tier."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from math import ceil


class UserTier(str, Enum):
    FREE = "free"
    PAID_TIER_1 = "paid_tier_1"
    ADMIN = "admin"


@dataclass(frozen=True)
class TierLimits:
    cooldown: timedelta
    retention_days: int


TIER_CONFIGS: dict[UserTier, TierLimits] = {
    UserTier.FREE: TierLimits(cooldown=timedelta(hours=6), retention_days=7),
    UserTier.PAID_TIER_1: TierLimits(cooldown=timedelta(hours=1), retention_days=28),
    UserTier.ADMIN: TierLimits(cooldown=timedelta(0), retention_days=365),  # no limit
}

TIER_NAMES: dict[UserTier, str] = {
    UserTier.FREE: "Free",
    UserTier.PAID_TIER_1: "Premium",
    UserTier.ADMIN: "Admin",
}


@dataclass
class RateLimitCheck:
    allowed: bool
    retry_after: datetime | None = None


def get_tier_limits(tier: str | UserTier) -> TierLimits:
    """Return limits for *tier*; unknown values get the free tier."""
    try:
        return TIER_CONFIGS[UserTier(tier)]
    except ValueError:
        return TIER_CONFIGS[UserTier.FREE]


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we store is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def can_execute(user, now: datetime | None = None) -> RateLimitCheck:
    """Check whether *user* may run a prompt now, based on the tier cooldown.

    *user* needs ``tier`` and ``last_execution_at`` attributes.
    """
    limits = get_tier_limits(user.tier)

    # Admins bypass rate limiting
    if limits.cooldown <= timedelta(0):
        return RateLimitCheck(allowed=True)

    if user.last_execution_at is None:
        return RateLimitCheck(allowed=True)

    now = now or datetime.now(timezone.utc)
    last = _as_utc(user.last_execution_at)

    if now - last < limits.cooldown:
        return RateLimitCheck(allowed=False, retry_after=last + limits.cooldown)

    return RateLimitCheck(allowed=True)


def get_retention_cutoff(user, now: datetime | None = None) -> datetime:
    """Oldest ``created_at`` still visible to *user* when listing results."""
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=get_tier_limits(user.tier).retention_days)


def format_retry_after(retry_after: datetime, now: datetime | None = None) -> str:
    """Human-readable wait time, e.g. ``"45 minutes"``, ``"2 hours"``, ``"3 days"``."""
    now = now or datetime.now(timezone.utc)
    diff_seconds = (_as_utc(retry_after) - now).total_seconds()
    diff_mins = ceil(diff_seconds / 60)
    diff_hours = ceil(diff_seconds / 3600)

    if diff_mins < 60:
        return f"{diff_mins} minute{'s' if diff_mins != 1 else ''}"

    if diff_hours < 24:
        return f"{diff_hours} hour{'s' if diff_hours != 1 else ''}"

    diff_days = ceil(diff_hours / 24)
    return f"{diff_days} day{'s' if diff_days != 1 else ''}"
