"""Sentry error reporting, enabled by SENTRY_DSN."""

import logging

from app.core.config import settings

logger = logging.getLogger(__name__)


def _drop_client_errors(event, hint):
    """Skip AppErrors below 500: bad input, cooldowns and auth failures are expected."""
    from app.core.exceptions import AppError

    exc_info = hint.get("exc_info") if hint else None
    if exc_info and isinstance(exc_info[1], AppError) and exc_info[1].status_code < 500:
        return None
    return event


def init_sentry() -> None:
    if not settings.sentry_dsn:
        logger.debug("Sentry DSN not configured, skipping")
        return

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.httpx import HttpxIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.app_env,
        traces_sample_rate=0.1 if settings.app_env == "production" else 1.0,
        send_default_pii=False,
        before_send=_drop_client_errors,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            HttpxIntegration(),
        ],
    )
    sentry_sdk.set_tag("fan_out_policy", settings.fan_out_policy)
    logger.info("Sentry initialized (env=%s)", settings.app_env)
