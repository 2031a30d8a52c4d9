# backend/app/services/review_comments.py
import html
import re
from datetime import datetime
from typing import Callable, Optional
from urllib.parse import urlparse

import dateparser
from bs4 import BeautifulSoup
from loguru import logger

from backend.app.db.schemas import CommentAvatar, ReviewComment, ReviewRecord

MYSQL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
TITLE_TEMPLATE = '<span class="wporg-review-title">{title}</span>'
_WHITESPACE = re.compile(r"\s+")
_ALLOWED_URL_SCHEMES = ("http", "https")
_DATEPARSER_SETTINGS = {"RETURN_AS_TIMEZONE_AWARE": False}


def sanitize_text(value: Optional[str]) -> str:
    if not value:
        return ""
    text = BeautifulSoup(value, "html.parser").get_text() if "<" in value else value
    return _WHITESPACE.sub(" ", text).strip()


def sanitize_url(value: Optional[str]) -> str:
    if not value:
        return ""
    url = value.strip()
    parsed = urlparse(url)
    if parsed.scheme.lower() not in _ALLOWED_URL_SCHEMES or not parsed.netloc:
        return ""
    return url


def _locale_language(locale: str) -> str:
    return (locale or "").replace("-", "_").split("_")[0].lower()


def parse_review_date(
    date_string: Optional[str],
    locale: str = "en_US",
    now: Callable[[], datetime] = datetime.now,
) -> str:
    """Turn a localized WordPress.org review date into ``YYYY-MM-DD HH:MM:SS``."""
    if not date_string:
        return now().strftime(MYSQL_DATETIME_FORMAT)

    parsed = None
    language = _locale_language(locale)
    if language:
        try:
            parsed = dateparser.parse(
                date_string, languages=[language], settings=_DATEPARSER_SETTINGS
            )
        except ValueError as e:
            logger.debug(f"Locale-aware date parsing unavailable for '{locale}': {e}")

    if parsed is None:
        parsed = dateparser.parse(date_string, settings=_DATEPARSER_SETTINGS)

    if parsed is None:
        logger.debug(f"Could not parse review date '{date_string}', using current time.")
        return now().strftime(MYSQL_DATETIME_FORMAT)

    return parsed.strftime(MYSQL_DATETIME_FORMAT)


def build_comment_content(review: ReviewRecord) -> str:
    content_parts = []

    title = sanitize_text(review.title)
    if title:
        content_parts.append(TITLE_TEMPLATE.format(title=html.escape(title)))

    if review.content:
        content_parts.append(html.escape(review.content, quote=False))

    return "\n\n".join(content_parts)


def convert_review_to_comment(
    review: ReviewRecord,
    post_id: int,
    locale: str = "en_US",
    now: Callable[[], datetime] = datetime.now,
) -> Optional[ReviewComment]:
    if review is None or not review.id or not post_id:
        return None

    comment_id = abs(int(review.id))
    post_id = abs(int(post_id))
    if not comment_id or not post_id:
        return None

    author = review.username
    comment = ReviewComment(
        comment_id=comment_id,
        post_id=post_id,
        author=sanitize_text(author.text) if author else "",
        author_url=sanitize_url(author.href) if author else "",
        date=parse_review_date(review.date, locale=locale, now=now),
        content=build_comment_content(review),
    )

    if review.avatar and review.avatar.src:
        avatar_src = sanitize_url(review.avatar.src)
        if avatar_src:
            comment.avatar = CommentAvatar(
                src=avatar_src, alt=sanitize_text(review.avatar.alt)
            )

    return comment
