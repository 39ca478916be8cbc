"""
Logging setup for Tempest.

Everything logs through structlog on top of stdlib logging. Output goes to
stderr so CLI commands can keep stdout for their JSON payloads.
"""

import logging
import re
import sys
from typing import Any

import structlog

from .settings import settings

# Keys whose values never reach the log (e.g. "database_url", "api_token").
_SENSITIVE_KEY = re.compile(r"(password|secret|token|api_key|database_url|dsn)", re.IGNORECASE)
# user:password@ inside catalog/database URLs
_URL_CREDENTIALS = re.compile(r"(?P<scheme>\w[\w+.-]*://)[^/@\s:]+:[^/@\s]+@")


def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        return _URL_CREDENTIALS.sub(r"\g<scheme>***@", value)
    if isinstance(value, dict):
        return {k: _scrub(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_scrub(v) for v in value]
    return value


def redact_secrets(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask credentials in event fields before rendering."""
    for key, value in event_dict.items():
        event_dict[key] = "***REDACTED***" if _SENSITIVE_KEY.search(key) else _scrub(value)
    return event_dict


def configure_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Configure stdlib logging and structlog.

    JSON rendering is used outside of ``dev`` unless overridden.
    """
    level_name = (level or settings.log_level).upper()
    if json_output is None:
        json_output = settings.env != "dev"

    numeric_level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)
    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(numeric_level)

    renderer: Any = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            redact_secrets,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **context: Any) -> Any:
    """Logger carrying the service and environment, plus any extra context.

    The returned proxy resolves its configuration on first use, so it is safe
    to create at import time, before configure_logging() has run.
    """
    return structlog.get_logger(name, service="tempest", env=settings.env, **context)
