"""Time-boxed in-process cache with an injectable clock."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Optional


Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float


class TtlCache:
    """Key/value store whose entries expire ``ttl_seconds`` after insertion.

    Timestamps come from ``clock`` unless passed explicitly, so tests can
    drive expiry without sleeping.
    """

    def __init__(self, ttl_seconds: float, clock: Optional[Clock] = None) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self._ttl_seconds = float(ttl_seconds)
        self._clock: Clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}
        self._lock = RLock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def put(self, key: str, value: Any, timestamp: Optional[float] = None) -> None:
        stored_at = self._clock() if timestamp is None else float(timestamp)
        with self._lock:
            self._entries[key] = CacheEntry(value=value, stored_at=stored_at)

    def get(self, key: str, now: Optional[float] = None) -> Optional[Any]:
        current = self._clock() if now is None else float(now)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if current - entry.stored_at > self._ttl_seconds:
                del self._entries[key]
                return None
            return entry.value

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
