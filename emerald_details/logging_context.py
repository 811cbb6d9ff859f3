"""Session correlation logging context.

Provides a session_id-aware logger that attaches a correlation ID to every
log message, so one customer's booking session (or one messaging view) can
be traced across the wizard, repositories and integrations.

Usage:
    from emerald_details.logging_context import get_session_logger, set_session_id

    set_session_id("SES-abc123")
    logger = get_session_logger(__name__)
    logger.info("Loading slots")  # record carries session_id="SES-abc123"
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Optional

_session_id: ContextVar[str] = ContextVar("session_id", default="NO_SESSION")


def new_session_id() -> str:
    """Generate a short, log-friendly session id."""
    return f"SES-{uuid.uuid4().hex[:8]}"


def set_session_id(session_id: Optional[str] = None) -> str:
    """Set the correlation ID for the current async context and return it."""
    value = session_id or new_session_id()
    _session_id.set(value)
    return value


def get_session_id() -> str:
    """Retrieve the current correlation ID."""
    return _session_id.get()


class SessionIdFilter(logging.Filter):
    """Injects session_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def get_session_logger(name: str) -> logging.Logger:
    """Return a logger with the SessionIdFilter attached.

    The filter adds ``session_id`` to each record so formatters can
    include ``%(session_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger


def attach_session_filter(logger: logging.Logger) -> None:
    """Add the filter to each of ``logger``'s handlers.

    Handler filters also see records propagated from child loggers, so
    every record reaching those handlers can be formatted with
    ``%(session_id)s``.
    """
    for handler in logger.handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())
