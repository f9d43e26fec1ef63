"""
Logging configuration module for structured logging.

This module configures the application's logging system using structlog.
It provides JSON output for production and human-readable console output
for development. Email addresses passed under the ``email`` key are masked
before rendering so raw addresses never reach the log sink.
"""

import logging
import sys
from typing import Any

import structlog

from src.core.config.settings import settings


def mask_email(email: Any) -> str:
    """Masks the local part of an email address for logging.

    ``"jonathan@example.com"`` becomes ``"jon***@example.com"``.
    """
    if not email or not isinstance(email, str) or "@" not in email:
        return "unknown"
    username, domain = email.split("@", 1)
    if len(username) > 3:
        username = username[:3] + "***"
    return f"{username}@{domain}"


def _mask_email_fields(_, __, event_dict: dict) -> dict:
    for key in ("email", "pending_email", "new_email"):
        if key in event_dict:
            event_dict[key] = mask_email(event_dict[key])
    return event_dict


def configure_logging(log_level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configures the application's logging system.

    Sets up structlog with ISO timestamps, log level, email masking and a
    JSON or console renderer depending on ``LOG_JSON``.
    """
    level = (log_level or settings.LOG_LEVEL).upper()
    use_json = settings.LOG_JSON if json_logs is None else json_logs

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        _mask_email_fields,
        structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()
