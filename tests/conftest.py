# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- A VirtualScheduler so timers fire deterministically
- An engine factory whose signals are collected in a plain list
- fakeredis-backed Valkey clients (clean state per test)
"""

import fakeredis
import pytest

from clicksignals.core import HostEnvironment, TelemetryEngine
from clicksignals.infrastructure import RecordingSink, VirtualScheduler
from clicksignals.utils.config import Settings

START_MS = 1_700_000_000_000

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@pytest.fixture()
def scheduler():
    """Virtual clock starting at a realistic epoch-millisecond value."""
    return VirtualScheduler(start_ms=START_MS)


@pytest.fixture()
def settings():
    """Default settings, independent of any cached instance."""
    return Settings()


@pytest.fixture()
def environment():
    """A desktop Chrome visitor arriving from a Google search."""
    return HostEnvironment(
        user_agent=CHROME_UA,
        referrer="https://www.google.com/search?q=trail+shoes",
        url="https://shop.example/?utm_source=newsletter&utm_campaign=spring",
    )


@pytest.fixture()
def signals():
    """List receiving every emitted signal, in emission order."""
    return []


@pytest.fixture()
def make_engine(signals, scheduler, environment, settings):
    """Factory for engines wired to the shared signal list and clock."""

    def _make(**kwargs):
        kwargs.setdefault("environment", environment)
        kwargs.setdefault("settings", settings)
        return TelemetryEngine(signals.append, scheduler, **kwargs)

    return _make


@pytest.fixture()
def engine(make_engine):
    return make_engine()


@pytest.fixture()
def recording_sink():
    return RecordingSink()


@pytest.fixture()
def fake_redis():
    """A clean fakeredis instance for each test.

    Uses decode_responses=True to match the real ValkeySessionStore client.
    """
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.flushall()
    client.close()


def of_type(signals, cls):
    """Signals of one class, in order."""
    return [s for s in signals if isinstance(s, cls)]
