# shiftcal/core/sentry_config.py
"""
Sentry configuration for error tracking in production.

Sentry is optional: it is only initialised in production with SENTRY_DSN
set, and the SDK is imported lazily so development installs can skip it.
"""

import logging
import os

from shiftcal.core.config import APP_VERSION

logger = logging.getLogger(__name__)

# Query parameters that never leave the process
FILTERED_QUERY_TERMS = ("token", "key", "secret")


def init_sentry() -> bool:
    """
    Initialize Sentry error tracking.

    Returns:
        True if Sentry was initialized, False otherwise.
    """
    is_production = os.getenv("PRODUCTION", "false").lower() == "true"
    sentry_dsn = os.getenv("SENTRY_DSN", "").strip()

    if not is_production:
        logger.info("Sentry disabled in development mode")
        return False

    if not sentry_dsn:
        logger.warning("SENTRY_DSN not set. Error tracking disabled.")
        return False

    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.logging import LoggingIntegration
        from sentry_sdk.integrations.starlette import StarletteIntegration
    except ImportError:
        logger.warning("Sentry SDK not installed. Install with: pip install 'shiftcal[sentry]'")
        return False

    environment = os.getenv("SENTRY_ENVIRONMENT", "production")
    sentry_sdk.init(
        dsn=sentry_dsn,
        integrations=[
            FastApiIntegration(),
            StarletteIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=0.1,
        sample_rate=1.0,
        release=os.getenv("RELEASE_VERSION", f"shiftcal@{APP_VERSION}"),
        environment=environment,
        send_default_pii=False,
        attach_stacktrace=True,
        before_send=before_send_hook,
    )

    logger.info("Sentry initialized (environment: %s)", environment)
    return True


def before_send_hook(event, hint):
    """
    Filter sensitive request data before sending to Sentry.

    Args:
        event: Sentry event data
        hint: Additional context

    Returns:
        The filtered event
    """
    request = event.get("request")
    if not request:
        return event

    headers = request.get("headers")
    if headers:
        for header in ("cookie", "authorization", "x-api-key"):
            if header in headers:
                headers[header] = "[Filtered]"

    query = request.get("query_string")
    if query and any(term in query.lower() for term in FILTERED_QUERY_TERMS):
        request["query_string"] = "[Filtered]"

    return event
