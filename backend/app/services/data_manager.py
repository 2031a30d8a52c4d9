# backend/app/services/data_manager.py
from datetime import datetime
from typing import Callable, Dict, Optional, Set

from loguru import logger

from backend.app.config import settings
from backend.app.core.caching import FileCache
from backend.app.core.memory_cache import MemoryCache
from backend.app.core.options import HOUR_IN_SECONDS, OptionsStore
from backend.app.core.tiered_cache import TieredCache
from backend.app.db.products import get_native_ratings_db, get_plugin_slug_db
from backend.app.db.schemas import NativeRatings, ProductData
from .review_cache import PluginReviewCache
from .review_comments import convert_review_to_comment
from .wporg_client import WordPressOrgClient

SlugLookup = Callable[[int], Optional[str]]
NativeRatingsLookup = Callable[[int], NativeRatings]


class ReviewDataManager:
    """
    Request-scoped access to WordPress.org review data for store products.

    Everything fetched for a product is memoised for the lifetime of the
    manager, so one instance should live for exactly one processing cycle.
    The cache tiers behind ``review_cache`` outlive it.
    """

    def __init__(
        self,
        review_cache: PluginReviewCache,
        slug_lookup: SlugLookup,
        native_ratings_lookup: Optional[NativeRatingsLookup] = None,
        locale: str = "en_US",
        now: Callable[[], datetime] = datetime.now,
    ):
        self.review_cache = review_cache
        self.slug_lookup = slug_lookup
        self.native_ratings_lookup = native_ratings_lookup
        self.locale = locale
        self.now = now
        self._product_data: Dict[int, Optional[ProductData]] = {}
        self._native_ratings: Dict[int, NativeRatings] = {}
        self._seen_slugs: Set[str] = set()

    def get_product_data(self, product_id: int) -> Optional[ProductData]:
        if product_id in self._product_data:
            return self._product_data[product_id]

        plugin_slug = self._lookup_slug(product_id)
        if not plugin_slug:
            logger.debug(f"Product {product_id} has no WordPress.org plugin slug configured.")
            self._product_data[product_id] = None
            return None

        self._seen_slugs.add(plugin_slug)
        reviews_result = self.review_cache.get_reviews(plugin_slug)
        count_result = self.review_cache.get_total_count(plugin_slug)
        rating_result = self.review_cache.get_rating_info(plugin_slug)

        reviews = reviews_result.value if reviews_result.ok else []
        comments = []
        comment_ratings: Dict[int, int] = {}
        for review in reviews or []:
            comment = convert_review_to_comment(
                review, product_id, locale=self.locale, now=self.now
            )
            if comment is None:
                logger.debug(f"Discarding unidentifiable review for plugin '{plugin_slug}'.")
                continue
            comments.append(comment)
            if review.rating:
                comment_ratings[comment.comment_id] = int(review.rating)

        if not reviews_result.ok:
            logger.warning(
                f"Reviews for plugin '{plugin_slug}' (product {product_id}) unavailable: {reviews_result.error}"
            )

        product_data = ProductData(
            slug=plugin_slug,
            reviews=reviews or [],
            comments=comments,
            comment_ratings=comment_ratings,
            total_count=count_result.value if count_result.ok else 0,
            rating_info=rating_result.value if rating_result.ok else None,
            has_data=reviews_result.ok and bool(reviews),
        )

        self._product_data[product_id] = product_data
        logger.info(
            f"Loaded WordPress.org data for product {product_id} ('{plugin_slug}'): "
            f"{len(comments)} comment(s), total {product_data.total_count}, has_data={product_data.has_data}"
        )
        return product_data

    def _lookup_slug(self, product_id: int) -> Optional[str]:
        try:
            return self.slug_lookup(product_id)
        except Exception as e:
            logger.error(f"Plugin slug lookup failed for product {product_id}: {e}")
            return None

    def get_native_ratings(self, product_id: int) -> NativeRatings:
        if product_id in self._native_ratings:
            return self._native_ratings[product_id]

        ratings = NativeRatings()
        if self.native_ratings_lookup is not None:
            try:
                ratings = self.native_ratings_lookup(product_id)
            except Exception as e:
                logger.error(f"Native ratings lookup failed for product {product_id}: {e}")

        self._native_ratings[product_id] = ratings
        return ratings

    def get_comment_ratings(self) -> Dict[int, int]:
        all_ratings: Dict[int, int] = {}
        for product_data in self._product_data.values():
            if product_data and product_data.comment_ratings:
                all_ratings.update(product_data.comment_ratings)
        return all_ratings

    def clear_cache(self, slug: str) -> bool:
        return self.review_cache.clear_cache(slug)

    def clear_product_cache(self, product_id: int):
        product_data = self._product_data.pop(product_id, None)
        self._native_ratings.pop(product_id, None)

        plugin_slug = product_data.slug if product_data else self._lookup_slug(product_id)
        if plugin_slug:
            self.clear_cache(plugin_slug)

    def clear_all_cache(self):
        self._product_data = {}
        self._native_ratings = {}
        for plugin_slug in sorted(self._seen_slugs):
            self.clear_cache(plugin_slug)
        self._seen_slugs = set()

    def reset(self):
        self._product_data = {}
        self._native_ratings = {}
        self._seen_slugs = set()


# --- Shared (process-wide) collaborators ---
_options_store: Optional[OptionsStore] = None
_tiered_cache: Optional[TieredCache] = None
_wporg_client: Optional[WordPressOrgClient] = None


def get_options_store() -> OptionsStore:
    global _options_store
    if _options_store is None:
        _options_store = OptionsStore(
            settings.backend.cache_dir, default_duration_hours=settings.cache.duration_hours
        )
    return _options_store


def get_tiered_cache() -> TieredCache:
    global _tiered_cache
    if _tiered_cache is None:
        _tiered_cache = TieredCache(
            fast=MemoryCache(maxsize=settings.cache.memory_maxsize),
            durable=FileCache(settings.backend.cache_dir),
            namespace=settings.cache.namespace,
        )
        logger.info(f"Review cache tiers initialised (durable dir: {settings.backend.cache_dir}).")
    return _tiered_cache


def get_wporg_client() -> WordPressOrgClient:
    global _wporg_client
    if _wporg_client is None:
        _wporg_client = WordPressOrgClient(
            api_url=settings.wporg.api_url,
            locale=settings.wporg.locale,
            timeout_seconds=settings.wporg.timeout_seconds,
            user_agent=settings.wporg.user_agent,
        )
    return _wporg_client


def build_review_cache() -> PluginReviewCache:
    return PluginReviewCache(
        client=get_wporg_client(),
        cache=get_tiered_cache(),
        long_ttl=get_options_store().cache_duration_seconds,
        short_ttl=settings.cache.short_duration_hours * HOUR_IN_SECONDS,
    )


def get_review_data_manager() -> ReviewDataManager:
    """FastAPI dependency: a fresh manager (and memo table) per request."""
    return ReviewDataManager(
        review_cache=build_review_cache(),
        slug_lookup=get_plugin_slug_db,
        native_ratings_lookup=get_native_ratings_db,
        locale=settings.wporg.locale,
    )


def shutdown_shared_instances():
    global _options_store, _tiered_cache, _wporg_client
    if _wporg_client is not None:
        _wporg_client.close()
    _options_store = None
    _tiered_cache = None
    _wporg_client = None
