# backend/app/db/products.py
from typing import Optional
from loguru import logger

from backend.app.config import settings
from backend.app.services.review_comments import sanitize_text
from .connection import execute_transaction, fetch_one
from .schemas import NativeRatings

PLUGIN_SLUG_META_KEY = "_wppr_plugin_slug"


def _table(name: str) -> str:
    return f"{settings.database.table_prefix}{name}"


def get_plugin_slug_db(product_id: int) -> Optional[str]:
    query = f"""
    SELECT meta_value FROM {_table('postmeta')}
    WHERE post_id = %s AND meta_key = %s
    ORDER BY meta_id ASC LIMIT 1
    """
    data = fetch_one(query, (product_id, PLUGIN_SLUG_META_KEY))
    slug = (data or {}).get("meta_value") or ""
    return slug.strip() or None


def set_plugin_slug_db(product_id: int, plugin_slug: str) -> bool:
    sanitized_slug = sanitize_text(plugin_slug)
    delete_query = f"DELETE FROM {_table('postmeta')} WHERE post_id = %s AND meta_key = %s"
    insert_query = f"""
    INSERT INTO {_table('postmeta')} (post_id, meta_key, meta_value)
    VALUES (%s, %s, %s)
    """
    try:
        execute_transaction(
            [
                (delete_query, (product_id, PLUGIN_SLUG_META_KEY)),
                (insert_query, (product_id, PLUGIN_SLUG_META_KEY, sanitized_slug)),
            ]
        )
        logger.success(f"Plugin slug for product {product_id} set to '{sanitized_slug}'.")
        return True
    except Exception as e:
        logger.exception(f"Exception in set_plugin_slug_db for product {product_id}: {e}")
        return False


def get_native_ratings_db(product_id: int) -> NativeRatings:
    """Sum and count of approved, positive store-native ratings for a product."""
    query = f"""
    SELECT
        COALESCE(SUM(CAST(cm.meta_value AS NUMERIC)), 0) AS ratings_sum,
        COUNT(*) AS ratings_count
    FROM {_table('commentmeta')} cm
    LEFT JOIN {_table('comments')} c ON cm.comment_id = c.comment_ID
    WHERE cm.meta_key = 'rating'
      AND c.comment_post_ID = %s
      AND c.comment_approved = '1'
      AND CAST(cm.meta_value AS NUMERIC) > 0
    """
    data = fetch_one(query, (product_id,))
    if not data:
        return NativeRatings()
    return NativeRatings(
        sum=float(data.get("ratings_sum") or 0), count=int(data.get("ratings_count") or 0)
    )
