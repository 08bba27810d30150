import logging

import httpx
import pytest

from taskboard.cache import InMemoryCache
from taskboard.weather import WeatherService, parse_weather

from fakes import LONDON_BODY, WEATHER_URL, FakeClock, FakeOpenWeather


def make_service(upstream, clock=None, api_key="test-key"):
    return WeatherService(
        api_key=api_key,
        cache=InMemoryCache(clock=clock or FakeClock()),
        http_client=upstream.client(),
        url=WEATHER_URL,
        timeout=5.0,
        ttl_seconds=600,
    )


class TestParseWeather:
    def test_normalizes_body(self):
        assert parse_weather(LONDON_BODY) == {
            "city": "London",
            "country": "GB",
            "temperature": 13,
            "feels_like": 10,
            "description": "Light rain",
            "icon": "10d",
            "humidity": 81,
            "wind_speed": 4.1,
        }

    def test_rounds_halves_away_from_zero(self):
        body = dict(LONDON_BODY, main={"temp": -2.5, "feels_like": 0.5, "humidity": 90})
        snapshot = parse_weather(body)
        assert snapshot["temperature"] == -3
        assert snapshot["feels_like"] == 1

    def test_only_first_letter_capitalized(self):
        body = dict(LONDON_BODY, weather=[{"description": "clear sky over NYC", "icon": "01d"}])
        assert parse_weather(body)["description"] == "Clear sky over NYC"

    def test_missing_country_and_wind_default(self):
        body = {k: v for k, v in LONDON_BODY.items() if k not in ("sys", "wind")}
        snapshot = parse_weather(body)
        assert snapshot["country"] == ""
        assert snapshot["wind_speed"] == 0.0

    def test_malformed_body_raises(self):
        with pytest.raises(KeyError):
            parse_weather({"name": "London"})


class TestWeatherService:
    def test_request_parameters(self):
        upstream = FakeOpenWeather()
        service = make_service(upstream)

        assert service.get_current_weather("London")["city"] == "London"
        request = upstream.calls[0]
        assert str(request.url).startswith(WEATHER_URL)
        assert request.url.params["q"] == "London"
        assert request.url.params["appid"] == "test-key"
        assert request.url.params["units"] == "metric"

    def test_default_city_is_london(self):
        upstream = FakeOpenWeather()
        make_service(upstream).get_current_weather()
        assert upstream.calls[0].url.params["q"] == "London"

    def test_cached_for_ten_minutes(self):
        upstream = FakeOpenWeather()
        clock = FakeClock()
        service = make_service(upstream, clock)

        first = service.get_current_weather("London")
        clock.advance(599)
        second = service.get_current_weather("London")
        assert first == second
        assert len(upstream.calls) == 1

        clock.advance(1)
        service.get_current_weather("London")
        assert len(upstream.calls) == 2

    def test_cache_is_per_city(self):
        upstream = FakeOpenWeather()
        service = make_service(upstream)
        service.get_current_weather("London")
        service.get_current_weather("Paris")
        assert [c.url.params["q"] for c in upstream.calls] == ["London", "Paris"]

    def test_missing_key_never_calls_out(self, caplog):
        upstream = FakeOpenWeather()
        service = make_service(upstream, api_key=None)
        with caplog.at_level(logging.WARNING, logger="taskboard.weather"):
            assert service.get_current_weather("London") is None
        assert upstream.calls == []
        assert service.configured is False
        assert "OpenWeather API key not configured" in caplog.text

    def test_non_2xx_returns_none_and_is_not_cached(self, caplog):
        upstream = FakeOpenWeather()
        upstream.status = 401
        upstream.body = {"cod": 401, "message": "Invalid API key"}
        service = make_service(upstream)

        with caplog.at_level(logging.WARNING, logger="taskboard.weather"):
            assert service.get_current_weather("London") is None
        assert "status=401" in caplog.text
        assert "Invalid API key" in caplog.text

        upstream.status = 200
        upstream.body = LONDON_BODY
        assert service.get_current_weather("London") is not None
        assert len(upstream.calls) == 2

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ReadTimeout("timed out"),
            httpx.ConnectError("connection refused"),
        ],
    )
    def test_transport_errors_return_none(self, error, caplog):
        upstream = FakeOpenWeather()
        upstream.error = error
        service = make_service(upstream)
        with caplog.at_level(logging.ERROR, logger="taskboard.weather"):
            assert service.get_current_weather("London") is None
        assert "Weather API error" in caplog.text

    @pytest.mark.parametrize(
        "body",
        [
            "<html>not json</html>",
            {"name": "London"},
            {"weather": []},
            [],
            dict(LONDON_BODY, name=None),
            dict(LONDON_BODY, sys={"country": None}),
            dict(LONDON_BODY, weather=[{"description": "light rain", "icon": 10}]),
        ],
    )
    def test_malformed_bodies_return_none(self, body):
        upstream = FakeOpenWeather()
        upstream.body = body
        service = make_service(upstream)
        assert service.get_current_weather("London") is None
        assert service.get_current_weather("London") is None
        assert len(upstream.calls) == 2

    def test_null_fields_are_not_cached(self, caplog):
        upstream = FakeOpenWeather()
        upstream.body = dict(LONDON_BODY, name=None)
        service = make_service(upstream)
        with caplog.at_level(logging.ERROR, logger="taskboard.weather"):
            assert service.get_current_weather("London") is None
        assert "Weather API error" in caplog.text

        upstream.body = LONDON_BODY
        assert service.get_current_weather("London")["city"] == "London"
        assert len(upstream.calls) == 2

    def test_icon_url(self):
        assert WeatherService.icon_url("04n") == "https://openweathermap.org/img/wn/04n@2x.png"

    def test_close_leaves_injected_client_open(self):
        upstream = FakeOpenWeather()
        http_client = upstream.client()
        service = WeatherService(api_key="k", cache=InMemoryCache(), http_client=http_client)
        service.close()
        assert http_client.is_closed is False

    def test_close_owned_client(self):
        service = WeatherService(api_key="k", cache=InMemoryCache())
        service.close()
        assert service._http.is_closed is True


class TestWeatherEndpoint:
    def test_returns_snapshot(self, client, alice):
        res = client.get("/api/weather", headers=alice)
        assert res.status_code == 200
        assert res.json()["city"] == "London"
        assert res.json()["wind_speed"] == 4.1

    def test_city_parameter(self, client, alice, upstream):
        upstream.body = dict(LONDON_BODY, name="Paris", sys={"country": "FR"})
        res = client.get("/api/weather?city=Paris", headers=alice)
        assert res.status_code == 200
        assert res.json()["country"] == "FR"
        assert upstream.calls[0].url.params["q"] == "Paris"

    def test_failure_is_500_with_fixed_body(self, client, alice, upstream):
        upstream.error = httpx.ReadTimeout("timed out")
        res = client.get("/api/weather", headers=alice)
        assert res.status_code == 500
        assert res.json() == {"error": "Unable to fetch weather data"}

    def test_shares_cache_with_task_list(self, client, alice, upstream):
        client.get("/tasks", headers=alice)
        client.get("/api/weather?city=London", headers=alice)
        assert len(upstream.calls) == 1
