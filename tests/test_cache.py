from taskboard.cache import InMemoryCache

from fakes import FakeClock


def test_put_and_get_until_expiry():
    clock = FakeClock()
    cache = InMemoryCache(clock=clock)
    cache.put("weather.London", {"city": "London"}, 600)

    clock.advance(599)
    assert cache.get("weather.London") == {"city": "London"}

    clock.advance(1)
    assert cache.get("weather.London") is None


def test_forget():
    cache = InMemoryCache(clock=FakeClock())
    cache.put("k", 1, 10)
    assert cache.forget("k") is True
    assert cache.forget("k") is False
    assert cache.get("k") is None


def test_remember_calls_factory_once_while_live():
    clock = FakeClock()
    cache = InMemoryCache(clock=clock)
    calls = []

    def factory():
        calls.append(1)
        return "value"

    assert cache.remember("k", 60, factory) == "value"
    assert cache.remember("k", 60, factory) == "value"
    assert len(calls) == 1

    clock.advance(60)
    cache.remember("k", 60, factory)
    assert len(calls) == 2


def test_remember_does_not_store_none():
    cache = InMemoryCache(clock=FakeClock())
    calls = []

    def factory():
        calls.append(1)
        return None

    assert cache.remember("k", 60, factory) is None
    assert cache.remember("k", 60, factory) is None
    assert len(calls) == 2


def test_put_sweeps_expired_entries():
    clock = FakeClock()
    cache = InMemoryCache(clock=clock)
    for city in ("London", "Paris", "Berlin"):
        cache.put(f"weather.{city}", {"city": city}, 600)
    cache.put("weather.Oslo", {"city": "Oslo"}, 1200)

    clock.advance(600)
    cache.put("weather.Rome", {"city": "Rome"}, 600)

    assert cache.size() == 2
    assert cache.get("weather.Oslo") == {"city": "Oslo"}
    assert cache.get("weather.Rome") == {"city": "Rome"}
