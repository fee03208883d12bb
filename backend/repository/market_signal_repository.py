"""Weather and event providers behind a time-boxed cache.

Providers are plain callables supplied by the host application. A provider
that raises, or one that was never configured, yields an empty result with
``available=False``; callers never see the exception.
"""

from __future__ import annotations

from threading import RLock
from typing import Callable, Optional, Sequence

from backend.domain.models import LocalEvent, SignalFetchResult, WeatherDay
from backend.utils.cache import Clock, TtlCache
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)

WeatherFetcher = Callable[[str], Sequence[WeatherDay]]
EventsFetcher = Callable[[str, Optional[float], Optional[float]], Sequence[LocalEvent]]


def _events_key(city: str, latitude: Optional[float], longitude: Optional[float]) -> str:
    if latitude is None or longitude is None:
        return city.strip().lower()
    return f"{city.strip().lower()}|{latitude:.4f}|{longitude:.4f}"


class CachedSignalProvider:
    """Caches successful fetches: weather for 6 hours and events for 24 hours by default."""

    def __init__(
        self,
        weather_fetcher: Optional[WeatherFetcher] = None,
        events_fetcher: Optional[EventsFetcher] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._weather_fetcher = weather_fetcher
        self._events_fetcher = events_fetcher
        self._weather_cache = TtlCache(self._settings.weather_cache_ttl_seconds, clock)
        self._events_cache = TtlCache(self._settings.events_cache_ttl_seconds, clock)
        self._lock = RLock()

    def fetch_weather(self, city: str) -> SignalFetchResult:
        if self._weather_fetcher is None or not city:
            return SignalFetchResult()

        key = city.strip().lower()
        with self._lock:
            cached = self._weather_cache.get(key)
            if cached is not None:
                return cached
            try:
                records = tuple(self._weather_fetcher(city))
            except Exception as exc:
                logger.warning("Weather provider unavailable | city=%s | error=%s", city, exc)
                return SignalFetchResult()

            if not records:
                logger.warning("Weather provider returned no data | city=%s", city)
                return SignalFetchResult()

            result = SignalFetchResult(records=records, available=True)
            self._weather_cache.put(key, result)
            logger.info("Weather fetched | city=%s | days=%s", city, len(records))
            return result

    def fetch_events(
        self,
        city: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> SignalFetchResult:
        if self._events_fetcher is None or not city:
            return SignalFetchResult()

        key = _events_key(city, latitude, longitude)
        with self._lock:
            cached = self._events_cache.get(key)
            if cached is not None:
                return cached
            try:
                records = tuple(self._events_fetcher(city, latitude, longitude))
            except Exception as exc:
                logger.warning("Events provider unavailable | city=%s | error=%s", city, exc)
                return SignalFetchResult()

            if not records:
                logger.info("Events provider returned no events | city=%s", city)
                return SignalFetchResult()

            result = SignalFetchResult(records=records, available=True)
            self._events_cache.put(key, result)
            logger.info("Events fetched | city=%s | events=%s", city, len(records))
            return result

    def invalidate(self) -> None:
        self._weather_cache.clear()
        self._events_cache.clear()
