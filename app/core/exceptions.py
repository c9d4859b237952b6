"""Application error taxonomy.

Every error carries a machine-readable ``kind`` and a human-readable ``detail``.
The FastAPI handler in ``app.main`` turns them into JSON responses; stack traces
only go to the logs.
"""

from datetime import datetime, timezone
from typing import Any


class AppError(Exception):
    status_code: int = 500
    kind: str = "internal_error"

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.detail, "kind": self.kind}


class ValidationError(AppError):
    """Missing or contradictory input."""

    status_code = 400
    kind = "validation_error"


class UnauthorizedError(AppError):
    status_code = 401
    kind = "unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    kind = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    kind = "not_found"


class RateLimitError(AppError):
    """Tier cooldown has not elapsed yet."""

    status_code = 429
    kind = "rate_limited"

    def __init__(self, detail: str, retry_after: datetime):
        super().__init__(detail)
        self.retry_after = retry_after

    def retry_after_seconds(self, now: datetime | None = None) -> float:
        now = now or datetime.now(timezone.utc)
        retry_after = self.retry_after
        if retry_after.tzinfo is None:
            retry_after = retry_after.replace(tzinfo=timezone.utc)
        return (retry_after - now).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["retryAfter"] = self.retry_after.isoformat()
        return data


class BackendInvocationError(AppError):
    """A text-generation backend failed for one model (network, timeout, bad model, quota)."""

    status_code = 502
    kind = "backend_error"

    def __init__(self, model: str, detail: str):
        super().__init__(f"{model}: {detail}")
        self.model = model
        self.reason = detail

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["model"] = self.model
        return data


class PersistenceError(AppError):
    """Storing a result (or the user's execution timestamp) failed."""

    status_code = 500
    kind = "persistence_error"
