"""Rate limiting configuration using slowapi.

Per-IP request throttling only; the per-user tier cooldown lives in
``app.core.tier_limits``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

# Keyed by client address
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
