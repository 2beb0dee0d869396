"""
Customer directory client.

Wraps a ``CustomerDirectory`` backend with the integration switches and the
failure policy: a lookup never raises and never waits longer than the
configured timeout. Anything that goes wrong comes back as an unsuccessful
response with one of the ``DirectoryErrorCode`` values, which callers treat
as "not found" so the call can carry on.
"""

import asyncio
import itertools
import time
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

from receptionist.directory.backends import (
    CustomerDirectory,
    MockCustomerDirectory,
    WebhookCustomerDirectory,
)
from receptionist.directory.config import (
    DirectoryConfig,
    effective_timeout_seconds,
    load_directory_config,
    validate_directory_config,
)
from receptionist.exceptions import DirectoryError
from receptionist.logging_context import get_call_logger
from receptionist.schemas.customer_schema import (
    CustomerRecord,
    DirectoryErrorCode,
    DirectoryLookupRequest,
    DirectoryLookupResponse,
)

logger = get_call_logger(__name__)

CORRELATION_PREFIX = "dir"

_sequence = itertools.count(1)


def new_correlation_id() -> str:
    """``dir-<epoch ms>-<sequence>-<random>``; unique within the process."""
    millis = int(time.time() * 1000)
    return f"{CORRELATION_PREFIX}-{millis}-{next(_sequence)}-{uuid.uuid4().hex[:7]}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CustomerDirectoryClient:
    """Looks up callers in the customer directory.

    Usage:
        client = CustomerDirectoryClient(enabled=True, use_mock_data=True,
                                         webhook_url="https://crm.example.com/lookup")
        response = await client.lookup(request)
        if response.found:
            ...
    """

    def __init__(
        self,
        config: Optional[DirectoryConfig] = None,
        backend: Optional[CustomerDirectory] = None,
        **overrides: Any,
    ) -> None:
        base = config or load_directory_config()
        self.config = replace(base, **overrides) if overrides else base

        self.validation = validate_directory_config(self.config)
        if not self.validation.valid:
            logger.warning(
                "Customer directory configuration warnings: %s",
                "; ".join(self.validation.errors),
            )

        if backend is not None:
            self._backend = backend
        elif self.config.use_mock_data:
            self._backend = MockCustomerDirectory()
        else:
            self._backend = WebhookCustomerDirectory(self.config)

    def is_enabled(self) -> bool:
        return self.config.enabled and bool(self.config.webhook_url)

    @property
    def timeout_seconds(self) -> float:
        return effective_timeout_seconds(self.config)

    async def lookup(self, request: DirectoryLookupRequest) -> DirectoryLookupResponse:
        """Look up a caller. Never raises."""
        correlation_id = new_correlation_id()

        if not self.is_enabled():
            logger.info("Directory integration not enabled, skipping lookup %s", correlation_id)
            return self._not_found(correlation_id)

        try:
            record = await asyncio.wait_for(
                self._backend.lookup(request, correlation_id=correlation_id),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Directory lookup %s timed out after %.1fs", correlation_id, self.timeout_seconds
            )
            return self._failure(
                correlation_id,
                DirectoryErrorCode.TIMEOUT,
                f"Lookup timed out after {int(self.timeout_seconds * 1000)} ms",
            )
        except DirectoryError as exc:
            logger.warning("Directory lookup %s failed (%s): %s", correlation_id, exc.code, exc)
            code = (
                DirectoryErrorCode(exc.code)
                if exc.code in DirectoryErrorCode.__members__
                else DirectoryErrorCode.SERVER_ERROR
            )
            return self._failure(correlation_id, code, exc.message)
        except Exception as exc:
            logger.exception("Directory lookup %s failed unexpectedly", correlation_id)
            return self._failure(correlation_id, DirectoryErrorCode.SERVER_ERROR, str(exc) or "Unknown error")

        return DirectoryLookupResponse(
            success=True,
            data=record,
            response_timestamp=_now_iso(),
            correlation_id=correlation_id,
        )

    @staticmethod
    def _not_found(correlation_id: str) -> DirectoryLookupResponse:
        return DirectoryLookupResponse(
            success=True,
            data=CustomerRecord(found=False),
            response_timestamp=_now_iso(),
            correlation_id=correlation_id,
        )

    @staticmethod
    def _failure(
        correlation_id: str, code: DirectoryErrorCode, error: str
    ) -> DirectoryLookupResponse:
        return DirectoryLookupResponse(
            success=False,
            error=error,
            error_code=code,
            response_timestamp=_now_iso(),
            correlation_id=correlation_id,
        )


_client: Optional[CustomerDirectoryClient] = None


def get_directory_client() -> CustomerDirectoryClient:
    """Process-wide client built from the environment on first use."""
    global _client
    if _client is None:
        _client = CustomerDirectoryClient()
    return _client
