"""Shared test fixtures and helpers."""

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from receptionist.conversation.session_store import SessionStore
from receptionist.directory.client import CustomerDirectoryClient
from receptionist.directory.config import DirectoryConfig
from receptionist.tools.dispatcher import ToolDispatcher

PACIFIC = ZoneInfo("America/Los_Angeles")

MOCK_PHONE = "+17145551234"
WEBHOOK_URL = "https://crm.example.com/lookup"


def pacific(year: int, month: int, day: int, hour: int, minute: int = 0) -> datetime:
    """A UTC instant given as Pacific wall-clock time."""
    return datetime(year, month, day, hour, minute, tzinfo=PACIFIC).astimezone(timezone.utc)


# Tuesday 10:30 AM Pacific (PDT).
OPEN_NOW = pacific(2025, 3, 18, 10, 30)
# Saturday 8:00 PM Pacific.
WEEKEND_NOW = pacific(2025, 3, 22, 20, 0)


def make_directory(**overrides) -> CustomerDirectoryClient:
    """Enabled client over the mock fixture table, unless overridden."""
    settings = {"enabled": True, "use_mock_data": True, "webhook_url": WEBHOOK_URL}
    settings.update(overrides)
    return CustomerDirectoryClient(config=DirectoryConfig(), **settings)


def make_dispatcher(
    store: Optional[SessionStore] = None,
    directory: Optional[CustomerDirectoryClient] = None,
    now: datetime = OPEN_NOW,
) -> ToolDispatcher:
    return ToolDispatcher(
        store if store is not None else SessionStore(),
        directory if directory is not None else make_directory(),
        clock=lambda: now,
    )


@pytest.fixture
def session_store():
    return SessionStore()


@pytest.fixture
def directory():
    return make_directory()


@pytest.fixture
def dispatcher(session_store, directory):
    return make_dispatcher(session_store, directory)


@pytest.fixture
def after_hours_dispatcher(session_store, directory):
    return make_dispatcher(session_store, directory, now=WEEKEND_NOW)
