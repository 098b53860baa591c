# tests/conftest.py
# Shared fixtures: a throwaway SQLite file per test, settings pointing at it,
# and a TestClient that runs the app lifespan (table reset, expiry shutdown).

from typing import Iterator

import pytest  # type: ignore[import-not-found]
from fastapi.testclient import TestClient

from relay.config import Settings
from relay.db.lifecycle import provision
from relay.db.storage import Storage
from relay.main_fastapi import create_app


class FakeClock:
    """Manually advanced millisecond clock for the rate limiter."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_settings(tmp_path):
    """Settings factory; every test gets its own database file."""
    def _make(**overrides) -> Settings:
        values = {
            "DB_PATH": str(tmp_path / "relay.db"),
            "RATE_LIMIT_MAX": 1000,
            "RATE_LIMIT_WINDOW_MS": 60_000,
            "CHAT_TTL_SECONDS": 60.0,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    # The context manager keeps one event loop alive for the whole test,
    # so expiry timers scheduled by /send can actually fire.
    with TestClient(app) as c:
        yield c


@pytest.fixture
def storage(tmp_path) -> Iterator[Storage]:
    st = Storage(str(tmp_path / "unit.db"))
    yield st
    st.close()


@pytest.fixture
def provisioned_storage(storage) -> Storage:
    provision(storage)
    return storage
