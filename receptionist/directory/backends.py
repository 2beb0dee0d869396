"""
Customer directory backends.

``CustomerDirectory`` is the capability the rest of the system depends on.
``MockCustomerDirectory`` serves a small fixture table for development and
tests. ``WebhookCustomerDirectory`` is the slot for the real agency CRM
webhook; until that integration goes live it logs the request it would
have sent and reports the caller as not found.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from receptionist.directory.config import DirectoryConfig
from receptionist.logging_context import get_call_logger, safe_log
from receptionist.schemas.customer_schema import (
    Address,
    CustomerRecord,
    DirectoryLookupRequest,
    Policy,
    PolicyStatus,
    PolicyType,
)
from receptionist.utils.phone import national_digits

logger = get_call_logger(__name__)


class CustomerDirectory(ABC):
    """Resolves a caller's phone number to a customer record."""

    @abstractmethod
    async def lookup(
        self, request: DirectoryLookupRequest, correlation_id: Optional[str] = None
    ) -> CustomerRecord:
        """Return the matching record, or ``CustomerRecord(found=False)``.

        Raises:
            DirectoryError: On transport, auth, or rate-limit failures.
        """


MOCK_CUSTOMERS: tuple[CustomerRecord, ...] = (
    CustomerRecord(
        found=True,
        customer_id="MOCK-001",
        full_name="John Smith",
        first_name="John",
        last_name="Smith",
        email="john.smith@example.com",
        phone="+17145551234",
        address=Address(
            street="123 Main St", city="Costa Mesa", state="CA", zip_code="92626"
        ),
        policies=[
            Policy(
                policy_number="AUTO-123456",
                policy_type=PolicyType.AUTO,
                carrier="Progressive",
                effective_date="2024-01-01",
                expiration_date="2025-01-01",
                status=PolicyStatus.ACTIVE,
                premium=150,
                premium_frequency="monthly",
            ),
            Policy(
                policy_number="HOME-789012",
                policy_type=PolicyType.HOME,
                carrier="State Farm",
                effective_date="2024-03-15",
                expiration_date="2025-03-15",
                status=PolicyStatus.ACTIVE,
                premium=1200,
                premium_frequency="annual",
            ),
        ],
        preferred_agent="Cherry",
        is_priority=False,
    ),
)


class MockCustomerDirectory(CustomerDirectory):
    """In-memory fixture table keyed by national phone digits."""

    def __init__(self, customers: Iterable[CustomerRecord] = MOCK_CUSTOMERS) -> None:
        self._customers: dict[str, CustomerRecord] = {
            national_digits(c.phone): c for c in customers if c.phone
        }

    async def lookup(
        self, request: DirectoryLookupRequest, correlation_id: Optional[str] = None
    ) -> CustomerRecord:
        key = national_digits(request.phone_number)
        record = self._customers.get(key)
        logger.info(
            "Mock directory lookup %s: %s", correlation_id, "found" if record else "not found"
        )
        if record is None:
            return CustomerRecord(found=False)
        return record.model_copy(deep=True)


class WebhookCustomerDirectory(CustomerDirectory):
    """Placeholder for the live CRM webhook."""

    def __init__(self, config: DirectoryConfig) -> None:
        self._config = config

    async def lookup(
        self, request: DirectoryLookupRequest, correlation_id: Optional[str] = None
    ) -> CustomerRecord:
        # TODO: POST the request to the webhook with bearer auth and
        # X-Correlation-ID once the CRM integration is live.
        safe_log(
            f"Directory webhook not yet live, would call {self._config.webhook_url} "
            f"({correlation_id}):",
            request.model_dump(),
            level=logging.INFO,
            logger=logger,
        )
        return CustomerRecord(found=False)
