from abc import ABC, abstractmethod
from typing import Any, Optional


class _Missing:
    """Sentinel returned by cache reads when no live entry exists."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISS"

    def __reduce__(self):
        return (_Missing, ())


MISS = _Missing()


class CacheBackend(ABC):
    @abstractmethod
    def get(self, key: str) -> Any:
        """Return the cached value for ``key`` or ``MISS``."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int) -> bool:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    def clear(self, prefix: str = "") -> int:
        """Drop every entry whose key starts with ``prefix``; return how many."""

    def remaining_ttl(self, key: str) -> Optional[float]:
        """Seconds until ``key`` expires, or None when the backend cannot tell."""
        return None
