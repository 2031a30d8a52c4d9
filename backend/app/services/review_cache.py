# backend/app/services/review_cache.py
from typing import Callable, List

from loguru import logger

from backend.app.core.cache_base import MISS
from backend.app.core.options import HOUR_IN_SECONDS
from backend.app.core.result import FetchResult
from backend.app.core.tiered_cache import TieredCache
from backend.app.db.schemas import RatingInfo, ReviewRecord
from .wporg_client import WordPressOrgClient

KIND_REVIEWS = "reviews"
KIND_COUNT = "count"
KIND_RATING = "rating"
CACHE_KINDS = (KIND_REVIEWS, KIND_COUNT, KIND_RATING)

DEFAULT_CACHE_DURATION = 24 * HOUR_IN_SECONDS
SHORT_CACHE_DURATION = HOUR_IN_SECONDS


class PluginReviewCache:
    """
    Per-slug read-through cache in front of the WordPress.org client.

    Review lists live for the configured (long) duration, the lightweight
    count and rating aggregates for the short duration. Only non-empty
    results are written; failures are never cached.
    """

    def __init__(
        self,
        client: WordPressOrgClient,
        cache: TieredCache,
        long_ttl: Callable[[], int] = lambda: DEFAULT_CACHE_DURATION,
        short_ttl: int = SHORT_CACHE_DURATION,
    ):
        self.client = client
        self.cache = cache
        self.long_ttl = long_ttl
        self.short_ttl = short_ttl

    def get_reviews(self, slug: str) -> FetchResult[List[ReviewRecord]]:
        key = self.cache.key(KIND_REVIEWS, slug)
        ttl = self.long_ttl()

        cached = self.cache.get(key, ttl)
        if cached is not MISS:
            return FetchResult.success([ReviewRecord.model_validate(r) for r in cached])

        result = self.client.fetch_reviews(slug)
        if result.ok and result.value:
            self.cache.set(key, [r.model_dump() for r in result.value], ttl)
        return result

    def get_total_count(self, slug: str) -> FetchResult[int]:
        key = self.cache.key(KIND_COUNT, slug)

        cached = self.cache.get(key, self.short_ttl)
        if cached is not MISS:
            return FetchResult.success(abs(int(cached)))

        result = self.client.fetch_total_count(slug)
        if result.ok and result.value > 0:
            self.cache.set(key, result.value, self.short_ttl)
        return result

    def get_rating_info(self, slug: str) -> FetchResult[RatingInfo]:
        key = self.cache.key(KIND_RATING, slug)

        cached = self.cache.get(key, self.short_ttl)
        if cached is not MISS:
            return FetchResult.success(RatingInfo.model_validate(cached))

        result = self.client.fetch_rating_info(slug)
        if result.ok and result.value.total_ratings > 0:
            self.cache.set(key, result.value.model_dump(), self.short_ttl)
        return result

    def clear_cache(self, slug: str) -> bool:
        for kind in CACHE_KINDS:
            self.cache.delete(self.cache.key(kind, slug))
        logger.info(f"Cleared cached WordPress.org data for plugin '{slug}'.")
        return True
