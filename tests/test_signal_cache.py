from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from backend.domain.models import LocalEvent, WeatherDay
from backend.repository.market_signal_repository import CachedSignalProvider
from backend.utils.cache import TtlCache
from backend.utils.config import get_settings


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def _settings():
    return replace(get_settings(), weather_cache_ttl_seconds=600, events_cache_ttl_seconds=3600)


def test_ttl_cache_expires_entries() -> None:
    clock = FakeClock()
    cache = TtlCache(60, clock)
    cache.put("city", "value")

    clock.now += 60
    assert cache.get("city") == "value"
    clock.now += 1
    assert cache.get("city") is None
    assert len(cache) == 0


def test_ttl_cache_accepts_explicit_timestamps() -> None:
    cache = TtlCache(10, FakeClock())
    cache.put("key", 1, timestamp=100.0)

    assert cache.get("key", now=105.0) == 1
    assert cache.get("key", now=111.0) is None


def test_ttl_cache_rejects_non_positive_ttl() -> None:
    with pytest.raises(ValueError):
        TtlCache(0)


def test_weather_is_cached_until_ttl() -> None:
    calls: list[str] = []

    def fetch_weather(city: str) -> list[WeatherDay]:
        calls.append(city)
        return [WeatherDay(temperature=20.0, rain_probability=0.1)]

    clock = FakeClock()
    provider = CachedSignalProvider(weather_fetcher=fetch_weather, settings=_settings(), clock=clock)

    first = provider.fetch_weather("Lisbon")
    second = provider.fetch_weather("lisbon")
    assert first.available is True
    assert second == first
    assert calls == ["Lisbon"]

    clock.now += 601
    provider.fetch_weather("Lisbon")
    assert len(calls) == 2


def test_provider_failure_degrades_and_is_not_cached() -> None:
    attempts = {"count": 0}

    def failing_events(city, latitude, longitude):
        attempts["count"] += 1
        raise TimeoutError("upstream timed out")

    provider = CachedSignalProvider(events_fetcher=failing_events, settings=_settings(), clock=FakeClock())

    result = provider.fetch_events("Porto", 41.15, -8.61)
    assert result.available is False
    assert result.records == ()

    provider.fetch_events("Porto", 41.15, -8.61)
    assert attempts["count"] == 2


def test_unconfigured_provider_reports_unavailable() -> None:
    provider = CachedSignalProvider(settings=_settings())
    assert provider.fetch_weather("Lisbon").available is False
    assert provider.fetch_events("Lisbon").available is False


def test_events_are_cached_per_location() -> None:
    calls: list[tuple] = []

    def fetch_events(city, latitude, longitude):
        calls.append((city, latitude, longitude))
        return [LocalEvent(name="Expo", category="conference", event_date=date(2026, 6, 2))]

    provider = CachedSignalProvider(events_fetcher=fetch_events, settings=_settings(), clock=FakeClock())

    provider.fetch_events("Lisbon", 38.72, -9.14)
    provider.fetch_events("Lisbon", 38.72, -9.14)
    provider.fetch_events("Lisbon", 38.80, -9.14)
    assert len(calls) == 2

    provider.invalidate()
    provider.fetch_events("Lisbon", 38.72, -9.14)
    assert len(calls) == 3


def test_empty_payload_is_unavailable_and_not_cached() -> None:
    calls: list[str] = []

    def fetch_weather(city: str) -> list[WeatherDay]:
        calls.append(city)
        return []

    provider = CachedSignalProvider(weather_fetcher=fetch_weather, settings=_settings(), clock=FakeClock())

    result = provider.fetch_weather("Lisbon")
    assert result.available is False
    assert result.records == ()

    provider.fetch_weather("Lisbon")
    assert len(calls) == 2
