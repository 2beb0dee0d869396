"""
Exception hierarchy for the receptionist.

Each exception carries a stable ``code``. Directory errors use the fixed
vocabulary returned in ``DirectoryLookupResponse.error_code``.
"""

from typing import Optional


class ReceptionistError(Exception):
    """Base exception for all receptionist errors."""

    code: str = "UNKNOWN_ERROR"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# =============================================================================
# Tool and session errors
# =============================================================================

class ToolInputError(ReceptionistError):
    """Tool arguments failed validation."""
    code = "INVALID_INPUT"

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        super().__init__(message, {"fields": fields or []})
        self.fields = fields or []


class UnknownToolError(ReceptionistError):
    """No tool is registered under the requested name."""
    code = "UNKNOWN_TOOL"


class SessionNotFoundError(ReceptionistError):
    """Session not found in the store."""
    code = "SESSION_NOT_FOUND"


class SessionLimitError(ReceptionistError):
    """Maximum concurrent sessions exceeded."""
    code = "SESSION_LIMIT_EXCEEDED"


# =============================================================================
# Customer directory errors
# =============================================================================

class DirectoryError(ReceptionistError):
    """Customer directory lookup failed."""
    code = "SERVER_ERROR"


class DirectoryNotFoundError(DirectoryError):
    code = "NOT_FOUND"


class DirectoryTimeoutError(DirectoryError):
    code = "TIMEOUT"


class DirectoryAuthError(DirectoryError):
    code = "AUTH_FAILED"


class DirectoryRateLimitError(DirectoryError):
    code = "RATE_LIMITED"


class DirectoryServerError(DirectoryError):
    code = "SERVER_ERROR"
