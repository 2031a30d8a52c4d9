# backend/app/core/memory_cache.py
import threading
import time
from typing import Any, Callable, NamedTuple

from cachetools import TLRUCache
from loguru import logger

from .cache_base import MISS, CacheBackend


class _Entry(NamedTuple):
    value: Any
    ttl: int


def _entry_expiry(key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class MemoryCache(CacheBackend):
    """Fast, process-local tier. Every entry carries its own time-to-live."""

    def __init__(self, maxsize: int = 1024, timer: Callable[[], float] = time.time):
        self._cache = TLRUCache(maxsize=maxsize, ttu=_entry_expiry, timer=timer)
        # cachetools caches are not thread-safe
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._cache.get(key)
        if entry is None:
            return MISS
        return entry.value

    def set(self, key: str, value: Any, ttl: int) -> bool:
        if ttl <= 0:
            logger.trace(f"MemoryCache: refusing to store '{key}' with ttl={ttl}.")
            return False
        try:
            with self._lock:
                self._cache[key] = _Entry(value, int(ttl))
        except ValueError as e:
            logger.warning(f"MemoryCache: could not store '{key}': {e}")
            return False
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._cache.pop(key, None) is not None

    def clear(self, prefix: str = "") -> int:
        removed = 0
        with self._lock:
            for key in list(self._cache.keys()):
                if key.startswith(prefix) and self._cache.pop(key, None) is not None:
                    removed += 1
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
