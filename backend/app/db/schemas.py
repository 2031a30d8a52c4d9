from typing import Optional, List, Dict
from pydantic import BaseModel, Field, model_validator


# --- WordPress.org Review Schemas ---
class ReviewAuthor(BaseModel):
    text: str = ""
    href: str = ""


class ReviewAvatar(BaseModel):
    src: str = ""
    alt: str = ""


class ReviewRecord(BaseModel):
    id: Optional[int] = None
    username: Optional[ReviewAuthor] = None
    avatar: Optional[ReviewAvatar] = None
    rating: Optional[int] = Field(None, ge=0, le=5)
    title: Optional[str] = None
    content: Optional[str] = None
    date: Optional[str] = None

    @property
    def author_name(self) -> str:
        return self.username.text if self.username else ""


class RatingInfo(BaseModel):
    average_rating: float = 0.0
    total_ratings: int = Field(0, ge=0)
    ratings: Dict[int, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _recompute_total_from_ratings(self):
        if self.total_ratings == 0 and self.ratings:
            self.total_ratings = sum(self.ratings.values())
        return self


# --- Host Comment Schemas ---
class CommentAvatar(BaseModel):
    src: str
    alt: str = ""


class ReviewComment(BaseModel):
    comment_id: int
    post_id: int
    author: str = ""
    author_url: str = ""
    date: str
    content: str = ""
    approved: str = "1"
    type: str = "review"
    parent: int = 0
    user_id: int = 0
    avatar: Optional[CommentAvatar] = None


# --- Product Schemas ---
class NativeRatings(BaseModel):
    sum: float = 0.0
    count: int = 0


class ProductData(BaseModel):
    slug: str
    reviews: List[ReviewRecord] = Field(default_factory=list)
    comments: List[ReviewComment] = Field(default_factory=list)
    comment_ratings: Dict[int, int] = Field(default_factory=dict)
    total_count: int = 0
    rating_info: Optional[RatingInfo] = None
    has_data: bool = False
