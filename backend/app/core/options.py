from pathlib import Path
from typing import Any, Union
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from .caching import load_cache, save_cache

OPTIONS_FILE_NAME = "options.json"
HOUR_IN_SECONDS = 3600
MIN_DURATION_HOURS = 1


class ReviewOptions(BaseModel):
    cache_duration_hours: int = Field(24, ge=1, le=168)
    clear_cache: bool = False


def coerce_hours(value: Any) -> int:
    """Coerce a configured duration to a non-negative whole number of hours."""
    try:
        return abs(int(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 0


class OptionsStore:
    """Runtime options persisted as JSON next to the durable cache entries."""

    def __init__(self, cache_dir: Union[str, Path], default_duration_hours: int = 24):
        self.cache_dir = Path(cache_dir)
        self.default_duration_hours = default_duration_hours

    def _raw(self) -> dict:
        raw = load_cache(OPTIONS_FILE_NAME, self.cache_dir)
        return raw if isinstance(raw, dict) else {}

    def load(self) -> ReviewOptions:
        raw = self._raw()
        data = {
            "cache_duration_hours": raw.get("cache_duration_hours", self.default_duration_hours),
            "clear_cache": raw.get("clear_cache", False),
        }
        try:
            return ReviewOptions(**data)
        except ValidationError as e:
            logger.warning(f"Stored review options are invalid, using defaults: {e}")
            return ReviewOptions(cache_duration_hours=self.default_duration_hours)

    def save(self, options: ReviewOptions) -> bool:
        return save_cache(options.model_dump(), OPTIONS_FILE_NAME, self.cache_dir)

    def cache_duration_seconds(self) -> int:
        raw = self._raw()
        hours = coerce_hours(raw.get("cache_duration_hours", self.default_duration_hours))
        return max(MIN_DURATION_HOURS, hours) * HOUR_IN_SECONDS
