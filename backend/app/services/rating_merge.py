# backend/app/services/rating_merge.py
"""
Merging of WordPress.org rating data into the store's own product figures.

Both sources use the same 1-5 star scale, so remote star counts are added to
native ones as-is.
"""
from typing import Dict, Optional

from backend.app.db.schemas import NativeRatings, ProductData


def _remote_ratings(product_data: Optional[ProductData]) -> Dict[int, int]:
    if not product_data or not product_data.has_data or not product_data.rating_info:
        return {}
    return product_data.rating_info.ratings


def merge_review_count(native_count: int, product_data: Optional[ProductData]) -> int:
    if not product_data or not product_data.has_data:
        return native_count
    return native_count + product_data.total_count


def blend_average_rating(
    native_average: str,
    native_ratings: NativeRatings,
    product_data: Optional[ProductData],
) -> str:
    remote = _remote_ratings(product_data)
    if not remote:
        return native_average

    remote_sum = sum(stars * count for stars, count in remote.items())
    remote_count = sum(remote.values())

    total_sum = native_ratings.sum + remote_sum
    total_count = native_ratings.count + remote_count
    if total_count > 0:
        return f"{total_sum / total_count:.2f}"
    return native_average


def merge_rating_counts(
    counts: Dict[int, int], product_data: Optional[ProductData]
) -> Dict[int, int]:
    merged = dict(counts)
    for stars, count in _remote_ratings(product_data).items():
        merged[stars] = merged.get(stars, 0) + count
    return merged


def adjusted_native_count(count: int, product_data: Optional[ProductData]) -> int:
    """Store-native review count once the WordPress.org total is taken back out."""
    if not product_data or not product_data.has_data:
        return count
    return max(0, count - product_data.total_count)


def reviews_tab_title(product_data: ProductData) -> str:
    return f"WordPress.org Reviews ({product_data.total_count})"
