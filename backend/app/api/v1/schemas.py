# backend/app/api/v1/schemas.py
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from backend.app.core.options import ReviewOptions
from backend.app.db.schemas import RatingInfo, ReviewComment, ReviewRecord

UNAVAILABLE_MESSAGE = "Unable to load WordPress.org reviews at this time."
EMPTY_MESSAGE = "No WordPress.org reviews found for this plugin."


class ProductReviewsResponse(BaseModel):
    product_id: int
    status: str = Field(..., description="'ok', 'empty' or 'unavailable'")
    message: Optional[str] = None
    plugin_slug: Optional[str] = None
    tab_title: Optional[str] = None
    reviews_url: Optional[str] = None
    total_count: int = 0
    rating_info: Optional[RatingInfo] = None
    comments: List[ReviewComment] = Field(default_factory=list)
    comment_ratings: Dict[int, int] = Field(default_factory=dict)
    reviews: List[ReviewRecord] = Field(default_factory=list)


class NativeProductRatings(BaseModel):
    review_count: int = Field(0, ge=0)
    average_rating: str = "0"
    rating_counts: Dict[int, int] = Field(default_factory=dict)
    includes_remote: bool = Field(
        False, description="review_count already includes the WordPress.org total"
    )


class RatingSummaryResponse(BaseModel):
    product_id: int
    has_data: bool
    review_count: int
    native_review_count: int
    average_rating: str
    rating_counts: Dict[int, int] = Field(default_factory=dict)


class PluginSlugInput(BaseModel):
    plugin_slug: str = Field(..., max_length=200)


class CommentRatingResponse(BaseModel):
    comment_id: int
    rating: int


class CacheClearResponse(BaseModel):
    status: str
    message: str
    plugin_slug: Optional[str] = None


class ReviewSettingsUpdate(BaseModel):
    cache_duration_hours: Optional[int] = Field(None, ge=1, le=168)
    clear_cache: bool = False


class ReviewSettingsResponse(ReviewOptions):
    cache_cleared: bool = False
    message: Optional[str] = None
