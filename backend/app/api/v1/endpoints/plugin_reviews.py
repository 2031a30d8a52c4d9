# backend/app/api/v1/endpoints/plugin_reviews.py
from fastapi import APIRouter, HTTPException, Depends, Path as FastApiPath
from loguru import logger

from backend.app.config import settings
from backend.app.db import products as db_products
from backend.app.services.data_manager import (
    ReviewDataManager,
    get_review_data_manager,
)
from backend.app.services import rating_merge
from backend.app.api.v1.schemas import (
    EMPTY_MESSAGE,
    UNAVAILABLE_MESSAGE,
    CacheClearResponse,
    CommentRatingResponse,
    NativeProductRatings,
    PluginSlugInput,
    ProductReviewsResponse,
    RatingSummaryResponse,
)

router = APIRouter()


def _reviews_url(plugin_slug: str) -> str:
    return f"{settings.wporg.reviews_base_url.rstrip('/')}/{plugin_slug}/reviews"


@router.get(
    "/products/{product_id}/wporg-reviews",
    response_model=ProductReviewsResponse,
    summary="Get WordPress.org reviews merged into a product",
)
def read_product_wporg_reviews(
    product_id: int = FastApiPath(..., ge=1, description="Store product ID"),
    data_manager: ReviewDataManager = Depends(get_review_data_manager),
):
    logger.debug(f"API GET /products/{product_id}/wporg-reviews")
    product_data = data_manager.get_product_data(product_id)

    if not product_data:
        return ProductReviewsResponse(
            product_id=product_id, status="unavailable", message=UNAVAILABLE_MESSAGE
        )

    if not product_data.has_data:
        return ProductReviewsResponse(
            product_id=product_id,
            status="empty",
            message=EMPTY_MESSAGE,
            plugin_slug=product_data.slug,
            reviews_url=_reviews_url(product_data.slug),
        )

    return ProductReviewsResponse(
        product_id=product_id,
        status="ok",
        plugin_slug=product_data.slug,
        tab_title=rating_merge.reviews_tab_title(product_data),
        reviews_url=_reviews_url(product_data.slug),
        total_count=product_data.total_count,
        rating_info=product_data.rating_info,
        comments=product_data.comments,
        comment_ratings=product_data.comment_ratings,
        reviews=product_data.reviews,
    )


@router.post(
    "/products/{product_id}/rating-summary",
    response_model=RatingSummaryResponse,
    summary="Merge store-native rating figures with WordPress.org ratings",
)
def merge_product_rating_summary(
    native: NativeProductRatings,
    product_id: int = FastApiPath(..., ge=1, description="Store product ID"),
    data_manager: ReviewDataManager = Depends(get_review_data_manager),
):
    product_data = data_manager.get_product_data(product_id)
    has_data = bool(product_data and product_data.has_data)

    native_count = native.review_count
    if native.includes_remote:
        native_count = rating_merge.adjusted_native_count(native_count, product_data)

    average = native.average_rating
    if has_data:
        average = rating_merge.blend_average_rating(
            native.average_rating, data_manager.get_native_ratings(product_id), product_data
        )

    return RatingSummaryResponse(
        product_id=product_id,
        has_data=has_data,
        review_count=rating_merge.merge_review_count(native_count, product_data),
        native_review_count=native_count,
        average_rating=average,
        rating_counts=rating_merge.merge_rating_counts(native.rating_counts, product_data),
    )


@router.put(
    "/products/{product_id}/plugin-slug",
    response_model=CacheClearResponse,
    summary="Link a product to a WordPress.org plugin slug",
)
def update_product_plugin_slug(
    slug_in: PluginSlugInput,
    product_id: int = FastApiPath(..., ge=1, description="Store product ID"),
    data_manager: ReviewDataManager = Depends(get_review_data_manager),
):
    data_manager.clear_product_cache(product_id)
    if not db_products.set_plugin_slug_db(product_id, slug_in.plugin_slug):
        raise HTTPException(status_code=500, detail="Could not store plugin slug.")

    plugin_slug = db_products.get_plugin_slug_db(product_id)
    if plugin_slug:
        data_manager.clear_cache(plugin_slug)
    logger.info(f"Product {product_id} linked to WordPress.org plugin '{plugin_slug}'.")
    return CacheClearResponse(
        status="updated",
        message=f"Product {product_id} now shows reviews for '{plugin_slug or ''}'.",
        plugin_slug=plugin_slug,
    )


@router.delete(
    "/products/{product_id}/wporg-cache",
    response_model=CacheClearResponse,
    summary="Clear cached WordPress.org data for a product",
)
def clear_product_wporg_cache(
    product_id: int = FastApiPath(..., ge=1, description="Store product ID"),
    data_manager: ReviewDataManager = Depends(get_review_data_manager),
):
    product_data = data_manager.get_product_data(product_id)
    if not product_data:
        raise HTTPException(
            status_code=404, detail="No WordPress.org plugin slug configured for this product."
        )

    data_manager.clear_product_cache(product_id)
    return CacheClearResponse(
        status="cleared",
        message=f"Cached WordPress.org data for '{product_data.slug}' cleared.",
        plugin_slug=product_data.slug,
    )


@router.get(
    "/products/{product_id}/comments/{comment_id}/rating",
    response_model=CommentRatingResponse,
    summary="Get the star rating of a WordPress.org review comment",
)
def read_comment_rating(
    product_id: int = FastApiPath(..., ge=1, description="Store product ID"),
    comment_id: int = FastApiPath(..., ge=1, description="Review comment ID"),
    data_manager: ReviewDataManager = Depends(get_review_data_manager),
):
    data_manager.get_product_data(product_id)
    rating = data_manager.get_comment_ratings().get(comment_id)
    if rating is None:
        raise HTTPException(status_code=404, detail="No rating found for this comment.")
    return CommentRatingResponse(comment_id=comment_id, rating=rating)
