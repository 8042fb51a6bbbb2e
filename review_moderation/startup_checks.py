"""Startup validation — catch misconfigurations before the app serves traffic."""
from __future__ import annotations

import logging
import sys

from config.settings import settings

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("async", "sync")
LOG_FORMATS = ("text", "json")


def validate_settings() -> list[str]:
    """Validate configuration. Returns list of warnings (empty = all good).

    Raises SystemExit for critical misconfigurations.
    """
    warnings: list[str] = []
    is_prod = settings.DATABASE_URL and "sqlite" not in settings.DATABASE_URL

    # Critical: services cannot be wired without a known Store adapter
    if settings.STORE_BACKEND not in STORE_BACKENDS:
        logger.critical(
            "STORE_BACKEND=%r is not one of %s", settings.STORE_BACKEND, ", ".join(STORE_BACKENDS)
        )
        sys.exit(1)

    if is_prod and "*" in settings.CORS_ORIGINS:
        warnings.append("CORS_ORIGINS is set to * — restrict in production")

    if settings.LOG_FORMAT not in LOG_FORMATS:
        warnings.append(f"LOG_FORMAT={settings.LOG_FORMAT!r} unknown — falling back to text")

    if is_prod and settings.STORE_BACKEND == "sync":
        warnings.append("STORE_BACKEND=sync blocks the event loop on every query — prefer async in production")

    if is_prod and not settings.SENTRY_DSN:
        warnings.append("SENTRY_DSN not set — error tracking disabled")

    for w in warnings:
        logger.warning("%s", w)

    if not warnings:
        logger.info("All startup checks passed")

    return warnings
