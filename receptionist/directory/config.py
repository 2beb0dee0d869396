"""
Customer directory integration settings.

Loaded from the environment each time a client is built, so tests and
callers can override individual values per instance. Missing settings
leave the integration disabled rather than failing.
"""

import math
import os
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

MIN_TIMEOUT_MS = 1000
MAX_TIMEOUT_MS = 30000
DEFAULT_TIMEOUT_MS = 5000


@dataclass(frozen=True)
class DirectoryConfig:
    """Settings for the customer directory webhook."""

    webhook_url: str = ""
    api_key: Optional[str] = None
    timeout_ms: float = DEFAULT_TIMEOUT_MS
    enabled: bool = False
    use_mock_data: bool = False


DEFAULT_DIRECTORY_CONFIG = DirectoryConfig()


@dataclass(frozen=True)
class ConfigValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


def _env_flag(env_var: str) -> bool:
    return os.getenv(env_var, "").strip().lower() == "true"


def _env_timeout(env_var: str) -> float:
    """Unparseable values become NaN so validation can report them."""
    raw = os.getenv(env_var, str(DEFAULT_TIMEOUT_MS))
    try:
        return float(raw)
    except (ValueError, TypeError):
        return math.nan


def load_directory_config() -> DirectoryConfig:
    """Read directory settings from the environment."""
    return DirectoryConfig(
        webhook_url=os.getenv("DIRECTORY_WEBHOOK_URL", ""),
        api_key=os.getenv("DIRECTORY_API_KEY") or None,
        timeout_ms=_env_timeout("DIRECTORY_TIMEOUT_MS"),
        enabled=_env_flag("DIRECTORY_ENABLED"),
        use_mock_data=_env_flag("DIRECTORY_USE_MOCK"),
    )


def _is_https_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme == "https" and bool(parsed.netloc)


def validate_directory_config(config: DirectoryConfig) -> ConfigValidation:
    """Collect every problem with ``config``. Never raises."""
    errors: list[str] = []

    if config.enabled and not config.webhook_url:
        errors.append("DIRECTORY_WEBHOOK_URL is required when DIRECTORY_ENABLED=true")

    if config.webhook_url and not _is_https_url(config.webhook_url):
        errors.append("DIRECTORY_WEBHOOK_URL must be a valid HTTPS URL")

    timeout = config.timeout_ms
    if (
        not isinstance(timeout, (int, float))
        or not math.isfinite(timeout)
        or not MIN_TIMEOUT_MS <= timeout <= MAX_TIMEOUT_MS
    ):
        errors.append(
            f"DIRECTORY_TIMEOUT_MS must be between {MIN_TIMEOUT_MS} and {MAX_TIMEOUT_MS}"
        )

    return ConfigValidation(valid=not errors, errors=errors)


def effective_timeout_seconds(config: DirectoryConfig) -> float:
    """Upper bound on a lookup's wait, whatever the configured value."""
    timeout = config.timeout_ms
    if not isinstance(timeout, (int, float)) or not math.isfinite(timeout):
        timeout = DEFAULT_TIMEOUT_MS
    return min(max(timeout, MIN_TIMEOUT_MS), MAX_TIMEOUT_MS) / 1000
