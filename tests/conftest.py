"""
Pytest configuration and fixtures for FleetDeck tests.
"""

import asyncio
import time
from typing import Any, List, Optional

import pytest

from fleetdeck.navigation import command_registry, route_table


class FakeCache:
    """Records invalidations in call order."""

    def __init__(self):
        self.invalidated: List[str] = []

    def invalidate(self, key: str) -> int:
        self.invalidated.append(key)
        return 1


_END = object()


class FakeConnection:
    """In-memory live connection driven by the test."""

    def __init__(self):
        self.sent: List[str] = []
        self.closed = False
        self._frames: asyncio.Queue = asyncio.Queue()

    def push(self, frame: Any) -> None:
        self._frames.put_nowait(frame)

    def drop(self, error: Optional[BaseException] = None) -> None:
        self._frames.put_nowait(error if error is not None else _END)

    def send(self, data: str) -> None:
        self.sent.append(data)

    async def close(self) -> None:
        self.closed = True
        self._frames.put_nowait(_END)

    async def __aiter__(self):
        while True:
            item = await self._frames.get()
            if item is _END:
                return
            if isinstance(item, BaseException):
                raise item
            yield item


class FakeTransport:
    """Hands out queued outcomes; refuses connections once they run out."""

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.opened: List[str] = []
        self.connections: List[FakeConnection] = []

    async def open(self, url: str) -> FakeConnection:
        self.opened.append(url)
        outcome = self.outcomes.pop(0) if self.outcomes else OSError("connection refused")
        if isinstance(outcome, BaseException):
            raise outcome
        self.connections.append(outcome)
        return outcome


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached before timeout")
        await asyncio.sleep(0.001)


@pytest.fixture
def fake_cache():
    return FakeCache()


@pytest.fixture
def make_transport():
    """Build a FakeTransport from a list of FakeConnection/exception outcomes."""
    return FakeTransport


@pytest.fixture
def make_connection():
    return FakeConnection


@pytest.fixture
def wait_until():
    return _wait_until


@pytest.fixture
def routes():
    return route_table


@pytest.fixture
def commands():
    return command_registry


@pytest.fixture
def sample_frames():
    """Inbound frames as the dashboard server sends them."""
    return {
        "load_update": '{"type": "load_update", "data": {"id": 7, "status": "assigned"}}',
        "driver_update": '{"type": "driver_update", "data": {"id": 3, "status": "on_route"}}',
        "alert": '{"type": "alert", "payload": {"title": "Load assigned successfully"}}',
        "unknown": '{"type": "fuel_price_tick", "data": {"diesel": 3.89}}',
        "malformed": "{not json",
    }


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LIVE_URL", "ws://testserver/ws")
    monkeypatch.setenv("API_BASE_URL", "http://testserver")
