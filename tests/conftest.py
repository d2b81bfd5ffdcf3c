"""
tests/conftest.py -- Shared test fixtures for TokenGate.

This module provides:
  - FakeClock: a manually advanced clock injected into stores and the manager,
    so expiry is tested without sleeping.
  - sequential_tokens(): a deterministic token factory.
  - manager: SessionManager over an in-memory store with the reference
    credential table (kyle / admin).

Settings are never read from the real environment here: tests that need
Settings construct them explicitly, and get_settings() is cache-cleared
around every test so an earlier test cannot leak configuration.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from itertools import count

import pytest

from auth.sessions import SessionManager
from auth.verifier import StaticCredentialVerifier
from cache.store import MemorySessionStore, SessionStoreUnavailable
from core.config import get_settings

CREDENTIALS = {"kyle": "CMF2025", "admin": "admin123"}


class FakeClock:
    """Callable clock that only moves when advance() is called."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class BrokenStore:
    """Store whose backend is down for every operation."""

    def put(self, key, value, ttl_seconds):
        raise SessionStoreUnavailable("connection refused")

    def get(self, key):
        raise SessionStoreUnavailable("connection refused")

    def delete(self, key):
        raise SessionStoreUnavailable("connection refused")

    def purge_expired(self):
        raise SessionStoreUnavailable("connection refused")


def sequential_tokens(prefix: str = "tok") -> Callable[[], str]:
    counter = count(1)
    return lambda: f"{prefix}-{next(counter)}"


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MemorySessionStore:
    return MemorySessionStore(clock=clock)


@pytest.fixture
def manager(store: MemorySessionStore, clock: FakeClock) -> SessionManager:
    """SessionManager with the reference credentials and an 8 hour TTL."""
    return SessionManager(
        verifier=StaticCredentialVerifier(CREDENTIALS),
        store=store,
        clock=clock,
    )
