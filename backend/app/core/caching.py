import json
import os
import re
import tempfile
import time
import joblib
from pathlib import Path
from typing import Any, Callable, Optional, Union
from loguru import logger

from .cache_base import MISS, CacheBackend

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")
ENTRY_SUFFIX = ".joblib"


def save_cache(data: Any, file_name: str, cache_dir: Union[str, Path]) -> bool:
    cache_path = Path(cache_dir) / file_name
    tmp_path = None
    try:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        # readers in other processes must never see a half-written file
        with tempfile.NamedTemporaryFile(
            dir=cache_path.parent, prefix=f".{cache_path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_path = Path(tmp.name)
            if isinstance(data, (dict, list)) and file_name.endswith(".json"):
                tmp.write(json.dumps(data, indent=4).encode("utf-8"))
            else:
                joblib.dump(data, tmp)
        os.replace(tmp_path, cache_path)
        logger.trace(f"Data cached successfully to {cache_path}")
        return True
    except Exception as e:
        logger.error(f"Error saving cache to {cache_path}: {e}")
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        return False


def load_cache(file_name: str, cache_dir: Union[str, Path]) -> Optional[Any]:
    cache_path = Path(cache_dir) / file_name
    if not cache_path.exists():
        return None
    try:
        if file_name.endswith(".json"):
            with open(cache_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            data = joblib.load(cache_path)
        logger.trace(f"Data loaded successfully from cache {cache_path}")
        return data
    except Exception as e:
        logger.warning(f"Error loading cache from {cache_path}: {e}. Invalidating cache.")
        try:
            cache_path.unlink()
        except OSError as oe:
            logger.error(f"Error removing corrupted cache file {cache_path}: {oe}")
        return None


def cache_file_name(key: str) -> str:
    return _UNSAFE_KEY_CHARS.sub("_", key) + ENTRY_SUFFIX


class FileCache(CacheBackend):
    """Durable tier: one joblib file per key, holding the value and its expiry."""

    def __init__(self, cache_dir: Union[str, Path], timer: Callable[[], float] = time.time):
        self.cache_dir = Path(cache_dir)
        self.timer = timer
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.cache_dir / cache_file_name(key)

    def get(self, key: str) -> Any:
        payload = load_cache(cache_file_name(key), self.cache_dir)
        if not isinstance(payload, dict) or "expires_at" not in payload:
            return MISS

        if self.timer() >= payload["expires_at"]:
            logger.debug(f"FileCache: entry '{key}' expired, removing.")
            self.delete(key)
            return MISS

        return payload.get("value", MISS)

    def remaining_ttl(self, key: str) -> Optional[float]:
        payload = load_cache(cache_file_name(key), self.cache_dir)
        if not isinstance(payload, dict) or "expires_at" not in payload:
            return None
        return max(0.0, payload["expires_at"] - self.timer())

    def set(self, key: str, value: Any, ttl: int) -> bool:
        if ttl <= 0:
            logger.trace(f"FileCache: refusing to store '{key}' with ttl={ttl}.")
            return False
        payload = {"value": value, "expires_at": self.timer() + int(ttl)}
        return save_cache(payload, cache_file_name(key), self.cache_dir)

    def delete(self, key: str) -> bool:
        try:
            self._path(key).unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"FileCache: error removing '{key}': {e}")
            return False

    def clear(self, prefix: str = "") -> int:
        file_prefix = _UNSAFE_KEY_CHARS.sub("_", prefix)
        removed = 0
        for cache_path in self.cache_dir.glob(f"*{ENTRY_SUFFIX}"):
            if not cache_path.name.startswith(file_prefix):
                continue
            try:
                cache_path.unlink()
                removed += 1
            except OSError as e:
                logger.error(f"FileCache: error removing {cache_path}: {e}")
        logger.info(f"FileCache: cleared {removed} entries with prefix '{prefix}'.")
        return removed
