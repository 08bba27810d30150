"""
Current weather from OpenWeatherMap, cached per city.

The service is best-effort: every failure is logged and reported as ``None``
so callers can simply leave the weather panel out.
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

import httpx

from .cache import Cache
from .models import WeatherSnapshot
from .schemas import WeatherOut

logger = logging.getLogger(__name__)

DEFAULT_CITY = "London"
DEFAULT_URL = "https://api.openweathermap.org/data/2.5/weather"
ICON_URL = "https://openweathermap.org/img/wn/{icon}@2x.png"


def _round_half_up(value: Any, digits: int = 0) -> Decimal:
    # Halves round away from zero (2.5 -> 3, -2.5 -> -3), unlike round().
    exponent = Decimal(1).scaleb(-digits)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def _capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def parse_weather(data: Dict[str, Any]) -> WeatherSnapshot:
    """
    Normalize an OpenWeatherMap current-weather body.

    The result is checked against ``WeatherOut``, so null or wrongly typed
    fields are rejected rather than cached.

    Raises KeyError, IndexError, TypeError or ValueError (including
    pydantic.ValidationError) when the body does not have the expected shape.
    """
    main = data["main"]
    condition = data["weather"][0]
    snapshot = WeatherOut.model_validate(
        {
            "city": data["name"],
            "country": (data.get("sys") or {}).get("country", ""),
            "temperature": int(_round_half_up(main["temp"])),
            "feels_like": int(_round_half_up(main["feels_like"])),
            "description": _capitalize_first(str(condition["description"])),
            "icon": condition["icon"],
            "humidity": int(main["humidity"]),
            "wind_speed": float(_round_half_up((data.get("wind") or {}).get("speed", 0), 1)),
        }
    )
    return snapshot.model_dump()  # type: ignore[return-value]


# PUBLIC_INTERFACE
class WeatherService:
    """
    Read-through cache in front of the OpenWeatherMap current-weather API.

    Args:
        api_key: OpenWeatherMap key. Without one the service never calls out.
        cache: Where snapshots are kept, keyed by ``weather.<city>``.
        http_client: Optional httpx.Client; one is created (and owned) if omitted.
        url: Current-weather endpoint.
        timeout: Seconds before the upstream call is abandoned.
        ttl_seconds: How long a snapshot stays cached.
    """

    def __init__(
        self,
        api_key: Optional[str],
        cache: Cache,
        http_client: Optional[httpx.Client] = None,
        url: str = DEFAULT_URL,
        timeout: float = 5.0,
        ttl_seconds: int = 600,
    ) -> None:
        self._api_key = api_key
        self._cache = cache
        self._owns_client = http_client is None
        self._http = http_client if http_client is not None else httpx.Client(timeout=timeout)
        self._url = url
        self._timeout = timeout
        self._ttl = ttl_seconds

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    @staticmethod
    def cache_key(city: str) -> str:
        return f"weather.{city}"

    @staticmethod
    def icon_url(icon: str) -> str:
        """Return the URL of the 2x PNG for an OpenWeatherMap icon code."""
        return ICON_URL.format(icon=icon)

    # PUBLIC_INTERFACE
    def get_current_weather(self, city: str = DEFAULT_CITY) -> Optional[WeatherSnapshot]:
        """
        Return current conditions for city, or None if they cannot be had.

        Never raises: a missing key, a non-2xx answer, a timeout or a
        malformed body all yield None, and failures are not cached.
        """
        if not self._api_key:
            logger.warning("OpenWeather API key not configured")
            return None
        return self._cache.remember(self.cache_key(city), self._ttl, lambda: self._fetch(city))

    def _fetch(self, city: str) -> Optional[WeatherSnapshot]:
        try:
            response = self._http.get(
                self._url,
                params={"q": city, "appid": self._api_key, "units": "metric"},
                timeout=self._timeout,
            )
            if response.is_success:
                snapshot = parse_weather(response.json())
                logger.debug("Fetched weather for %s", city)
                return snapshot

            logger.warning(
                "Weather API request failed status=%s body=%s", response.status_code, response.text
            )
            return None
        except Exception as exc:
            logger.error("Weather API error: %s", exc)
            return None

    def close(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._owns_client:
            self._http.close()
