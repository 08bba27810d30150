from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

import httpx

from taskboard.settings import Settings

WEATHER_URL = "https://weather.test/data/2.5/weather"

LONDON_BODY: Dict[str, Any] = {
    "name": "London",
    "sys": {"country": "GB"},
    "main": {"temp": 12.5, "feels_like": 10.4, "humidity": 81},
    "weather": [{"description": "light rain", "icon": "10d"}],
    "wind": {"speed": 4.06},
}


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeOpenWeather:
    """
    Stand-in for the OpenWeatherMap endpoint, served through httpx.MockTransport.

    Set ``status``/``body`` to change the answer, or ``error`` to make the
    transport raise instead of answering.
    """

    def __init__(self) -> None:
        self.calls: List[httpx.Request] = []
        self.status = 200
        self.body: Any = LONDON_BODY
        self.error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status, json=self.body)
        return httpx.Response(self.status, text=str(self.body))

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


def basic_auth(name: str, password: str) -> Dict[str, str]:
    token = base64.b64encode(f"{name}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


def make_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = dict(
        auth_users=(("alice", "alice-pw"), ("bob", "bob-pw")),
        openweather_api_key="test-key",
        openweather_url=WEATHER_URL,
    )
    values.update(overrides)
    return Settings(**values)
