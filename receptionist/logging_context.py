"""Session-aware logging helpers.

Every log record emitted through ``get_call_logger`` carries the id of the
call (LiveKit room) currently being handled, so concurrent calls in one
worker process can be told apart. ``safe_log`` is the only way caller data
reaches the log: the payload is masked before it is serialized.

Usage:
    from receptionist.logging_context import get_call_logger, safe_log, set_session_id

    set_session_id("room-abc123")
    logger = get_call_logger(__name__)
    safe_log("Quote request captured:", quote, logger=logger)
"""

import json
import logging
from contextvars import ContextVar
from typing import Any, Optional

from receptionist.utils.privacy import mask_pii

_session_id: ContextVar[str] = ContextVar("session_id", default="NO_SESSION")


def set_session_id(session_id: str) -> None:
    """Set the session id for the current async context."""
    _session_id.set(session_id)


def get_session_id() -> str:
    """Retrieve the session id for the current async context."""
    return _session_id.get()


class SessionIdFilter(logging.Filter):
    """Injects the session id into every log record as ``call_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.call_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def get_call_logger(name: str) -> logging.Logger:
    """Return a logger with the SessionIdFilter attached.

    Formatters can include ``%(call_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger


def masked_json(data: Any) -> str:
    """Serialize ``data`` to indented JSON after masking PII."""
    return json.dumps(mask_pii(data), indent=2, default=str)


def safe_log(
    label: str,
    data: Any,
    level: int = logging.INFO,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log ``data`` under ``label`` with all PII fields masked."""
    target = logger or get_call_logger(__name__)
    if target.isEnabledFor(level):
        target.log(level, "%s %s", label, masked_json(data))
