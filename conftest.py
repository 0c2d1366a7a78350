"""Root pytest configuration."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from core.config import DEFAULT_EVENT_TIMEZONE

# Load environment variables before tests run
_root = Path(__file__).parent
load_dotenv(_root / ".env")
load_dotenv(_root / ".env.local", override=True)


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use default event loop policy for all async tests."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture(autouse=True)
def event_timezone(monkeypatch):
    """Pin the event timezone; expected dates and times assume IST."""
    monkeypatch.setenv("EVENT_TIMEZONE", DEFAULT_EVENT_TIMEZONE)
    return DEFAULT_EVENT_TIMEZONE
