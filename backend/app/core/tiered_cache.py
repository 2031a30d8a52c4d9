from typing import Any
from loguru import logger

from .cache_base import MISS, CacheBackend


class TieredCache:
    """
    Read-through / write-through composition of a fast and a durable tier.

    Reads check the fast tier, then the durable tier (backfilling the fast
    tier on a hit). Writes go to both tiers; only the durable write decides
    whether the write succeeded.
    """

    def __init__(self, fast: CacheBackend, durable: CacheBackend, namespace: str = "wppr"):
        self.fast = fast
        self.durable = durable
        self.namespace = namespace

    def get(self, key: str, ttl: int) -> Any:
        value = self._get_fast(key)
        if value is not MISS:
            logger.trace(f"TieredCache: fast-tier hit for '{key}'.")
            return value

        value = self.durable.get(key)
        if value is not MISS:
            logger.debug(f"TieredCache: durable-tier hit for '{key}', backfilling fast tier.")
            remaining = self.durable.remaining_ttl(key)
            if remaining is not None:
                ttl = min(ttl, int(remaining))
            self._set_fast(key, value, ttl)
            return value

        logger.debug(f"TieredCache: miss for '{key}'.")
        return MISS

    def set(self, key: str, value: Any, ttl: int) -> bool:
        self._set_fast(key, value, ttl)
        stored = self.durable.set(key, value, ttl)
        if not stored:
            logger.warning(f"TieredCache: durable write failed for '{key}'.")
        return stored

    def delete(self, key: str) -> bool:
        fast_deleted = self.fast.delete(key)
        durable_deleted = self.durable.delete(key)
        return fast_deleted or durable_deleted

    def clear(self) -> int:
        prefix = f"{self.namespace}_"
        removed = self.fast.clear(prefix)
        removed += self.durable.clear(prefix)
        logger.info(f"TieredCache: cleared namespace '{self.namespace}' ({removed} entries).")
        return removed

    def key(self, kind: str, slug: str) -> str:
        return f"{self.namespace}_{kind}_{slug}"

    def _get_fast(self, key: str) -> Any:
        try:
            return self.fast.get(key)
        except Exception as e:
            logger.warning(f"TieredCache: fast-tier read failed for '{key}': {e}")
            return MISS

    def _set_fast(self, key: str, value: Any, ttl: int) -> None:
        try:
            self.fast.set(key, value, ttl)
        except Exception as e:
            logger.warning(f"TieredCache: fast-tier write failed for '{key}': {e}")
