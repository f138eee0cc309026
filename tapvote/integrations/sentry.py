# =============================================================================
# Sentry Error Tracking Integration
# =============================================================================
#
# Setup:
#   1. Create a Python project at sentry.io
#   2. Copy its DSN to .env: SENTRY_DSN=https://...@sentry.io/...
#
# Usage:
#   init_sentry() runs at app startup (tapvote/api/app.py).
#   Handlers report collaborator failures with capture_exception().
#
# =============================================================================

import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from tapvote.config import Settings, get_settings

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings | None = None) -> bool:
    """
    Initialize Sentry error tracking.
    
    Returns True if initialized, False if skipped.
    """
    settings = settings or get_settings()
    
    if not settings.sentry_dsn:
        logger.info("SENTRY_DSN not set - error tracking disabled")
        return False
    
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="url"),
            StarletteIntegration(transaction_style="url"),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        # Tokens and user ids stay out of reports
        send_default_pii=False,
        before_send=_filter_events,
        before_send_transaction=_filter_transactions,
    )
    
    logger.info(f"Sentry initialized for {settings.environment}")
    return True


def _filter_events(event: dict, hint: dict) -> dict | None:
    """Scrub credentials from request headers."""
    headers = event.get("request", {}).get("headers")
    if isinstance(headers, dict):
        for key in list(headers.keys()):
            if key.lower() in ("authorization", "cookie"):
                headers[key] = "[Filtered]"
    
    return event


def _filter_transactions(event: dict, hint: dict) -> dict | None:
    """Skip health checks. Transactions are named by route template."""
    if event.get("transaction", "") in ("/health", "/api/v1/welcome"):
        return None
    return event


def capture_exception(error: Exception, **context) -> str | None:
    """
    Report an exception to Sentry, or log it when Sentry is off.
    
    Returns the event ID if captured, None otherwise.
    """
    if not sentry_sdk.get_client().is_active():
        details = ", ".join(f"{key}={value}" for key, value in context.items())
        logger.error(f"Unreported error ({details}): {error}", exc_info=error)
        return None
    
    with sentry_sdk.new_scope() as scope:
        for key, value in context.items():
            scope.set_extra(key, value)
        return sentry_sdk.capture_exception(error)
