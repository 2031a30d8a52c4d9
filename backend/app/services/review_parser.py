# backend/app/services/review_parser.py
"""
Extraction of review records from the WordPress.org ``reviews`` section markup.

The markup is the HTML block the plugin directory renders for the latest
reviews of a plugin, e.g.::

    <div class="review">
      <div class="review-head">
        <h4 class="review-title">Works great</h4>
        <div class="wporg-ratings" data-rating="5">...</div>
        <p class="reviewer">By <a href="https://profiles.wordpress.org/jane/">
          <img alt="" src="https://secure.gravatar.com/avatar/..." class="avatar avatar-16 photo">
          </a><a href="https://profiles.wordpress.org/jane/" class="reviewer-name">jane</a>
          on <span class="review-date">July 21, 2025</span></p>
      </div>
      <div class="review-body">Does exactly what it says.</div>
    </div>

Missing pieces simply leave the corresponding field empty.
"""
import hashlib
import re
from typing import Callable, List, Optional, Union

from bs4 import BeautifulSoup, Tag
from loguru import logger

from backend.app.db.schemas import ReviewAuthor, ReviewAvatar, ReviewRecord

REVIEW_CLASS = "review"
ID_SEPARATOR = "|"
CONTENT_SNIPPET_LENGTH = 50
MIN_PRIMARY_ID_PARTS = 2

# Same character set PHP's trim() removes.
_TRIM_CHARS = " \t\n\r\0\x0b"
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _clean_text(node: Tag) -> str:
    return node.get_text().strip(_TRIM_CHARS)


def _class_contains(fragment: str) -> Callable[[Tag], bool]:
    def matcher(tag: Tag) -> bool:
        classes = tag.get("class") or []
        if isinstance(classes, str):
            classes = [classes]
        return fragment in " ".join(classes)

    return matcher


def _first_with_class(node: Tag, fragment: str, tag_name: Optional[str] = None) -> Optional[Tag]:
    match_class = _class_contains(fragment)
    return node.find(
        lambda tag: (tag_name is None or tag.name == tag_name) and match_class(tag)
    )


def _to_rating(raw: Optional[str]) -> int:
    if not raw:
        return 0
    match = _LEADING_INT.match(str(raw))
    if not match:
        return 0
    return max(0, min(5, int(match.group(1))))


def generate_review_id(review: ReviewRecord) -> Optional[int]:
    """Derive the stable numeric id of a review, or None when nothing identifies it."""
    id_parts: List[str] = []

    if review.author_name:
        id_parts.append(review.author_name)
    if review.title:
        id_parts.append(review.title)
    if review.date:
        id_parts.append(review.date)

    if len(id_parts) < MIN_PRIMARY_ID_PARTS and review.content:
        id_parts.append(review.content[:CONTENT_SNIPPET_LENGTH])

    if not id_parts:
        return None

    digest = hashlib.sha256(ID_SEPARATOR.join(id_parts).encode("utf-8")).hexdigest()
    return int(digest[:8], 16)


def extract_review(review_node: Tag) -> ReviewRecord:
    review = ReviewRecord()

    username_node = _first_with_class(review_node, "reviewer-name", tag_name="a")
    if username_node is not None:
        review.username = ReviewAuthor(
            text=_clean_text(username_node), href=username_node.get("href") or ""
        )

    avatar_node = _first_with_class(review_node, "avatar", tag_name="img")
    if avatar_node is not None:
        review.avatar = ReviewAvatar(
            src=avatar_node.get("src") or "", alt=avatar_node.get("alt") or ""
        )

    rating_node = _first_with_class(review_node, "wporg-ratings")
    if rating_node is not None:
        review.rating = _to_rating(rating_node.get("data-rating"))

    title_node = review_node.find("h4")
    if title_node is not None:
        review.title = _clean_text(title_node)

    content_node = _first_with_class(review_node, "review-body")
    if content_node is not None:
        review.content = _clean_text(content_node)

    date_node = _first_with_class(review_node, "review-date")
    if date_node is not None:
        review.date = _clean_text(date_node)

    review.id = generate_review_id(review)
    return review


def parse_reviews_html(reviews_html: Union[str, bytes, None]) -> List[ReviewRecord]:
    if not reviews_html:
        return []

    if isinstance(reviews_html, bytes):
        reviews_html = reviews_html.decode("utf-8", errors="replace")

    try:
        soup = BeautifulSoup(reviews_html, "html.parser")
    except Exception as e:
        logger.warning(f"Could not parse reviews markup ({len(reviews_html)} chars): {e}")
        return []

    reviews: List[ReviewRecord] = []
    for review_node in soup.find_all(class_=REVIEW_CLASS):
        try:
            reviews.append(extract_review(review_node))
        except Exception as e:
            logger.warning(f"Skipping unreadable review node: {e}")

    logger.debug(f"Parsed {len(reviews)} review(s) from reviews markup.")
    return reviews
