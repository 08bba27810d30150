from __future__ import annotations

from typing import Dict, Iterator

import pytest
from fastapi.testclient import TestClient

from taskboard.cache import InMemoryCache
from taskboard.main import create_app
from taskboard.settings import Settings

from fakes import FakeClock, FakeOpenWeather, basic_auth, make_settings


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def upstream() -> FakeOpenWeather:
    return FakeOpenWeather()


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def client(settings: Settings, upstream: FakeOpenWeather, clock: FakeClock) -> Iterator[TestClient]:
    """A TestClient over a fresh app: in-memory tasks, fake clock, fake weather upstream."""
    app = create_app(
        settings=settings,
        cache=InMemoryCache(clock=clock),
        http_client=upstream.client(),
    )
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def alice() -> Dict[str, str]:
    return basic_auth("alice", "alice-pw")


@pytest.fixture()
def bob() -> Dict[str, str]:
    return basic_auth("bob", "bob-pw")
