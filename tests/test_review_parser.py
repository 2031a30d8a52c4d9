"""Unit tests for the WordPress.org review markup parser."""

import hashlib

from backend.app.db.schemas import ReviewAuthor, ReviewRecord
from backend.app.services.review_parser import generate_review_id, parse_reviews_html
from tests.conftest import REVIEWS_HTML


def _expected_id(*parts):
    digest = hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()
    return int(digest[:8], 16)


def test_parse_full_review_markup():
    reviews = parse_reviews_html(REVIEWS_HTML)

    assert len(reviews) == 2
    first = reviews[0]
    assert first.username.text == "jane"
    assert first.username.href == "https://profiles.wordpress.org/jane/"
    assert first.avatar.src == "https://secure.gravatar.com/avatar/abc?s=16&d=monsterid&r=g"
    assert first.avatar.alt == "Jane avatar"
    assert first.rating == 5
    assert first.title == "Works great"
    assert first.content == "Does exactly what it says & more."
    assert first.date == "July 21, 2025"
    assert first.id == _expected_id("jane", "Works great", "July 21, 2025")

    assert reviews[1].rating == 3
    assert reviews[1].avatar.alt == ""


def test_empty_markup_yields_empty_list():
    assert parse_reviews_html("") == []
    assert parse_reviews_html(None) == []


def test_markup_without_review_nodes_yields_empty_list():
    html = '<div class="reviewer">Nobody</div><p class="review-body">orphan</p>'
    assert parse_reviews_html(html) == []


def test_malformed_markup_is_parsed_best_effort():
    html = '<div class="review"><h4>Unclosed title <p class="review-body">Body text<div'

    reviews = parse_reviews_html(html)

    assert len(reviews) == 1
    assert reviews[0].username is None
    assert reviews[0].avatar is None
    assert reviews[0].rating is None
    assert reviews[0].id is not None


def test_missing_sub_elements_leave_fields_empty():
    html = '<li class="review"><span class="review-date">May 1, 2024</span></li>'

    (review,) = parse_reviews_html(html)

    assert review.date == "May 1, 2024"
    assert review.title is None
    assert review.content is None
    assert review.id == _expected_id("May 1, 2024")


def test_non_numeric_rating_becomes_zero():
    html = '<div class="review"><h4>T</h4><div class="wporg-ratings" data-rating="n/a"></div></div>'

    (review,) = parse_reviews_html(html)

    assert review.rating == 0


def test_id_falls_back_to_content_snippet():
    content = "x" * 80
    review = ReviewRecord(username=ReviewAuthor(text="jane"), content=content)

    assert generate_review_id(review) == _expected_id("jane", "x" * 50)


def test_content_snippet_not_used_with_two_primary_parts():
    review = ReviewRecord(
        username=ReviewAuthor(text="jane"), date="July 21, 2025", content="ignored"
    )

    assert generate_review_id(review) == _expected_id("jane", "July 21, 2025")


def test_id_is_none_without_identifying_fields():
    assert generate_review_id(ReviewRecord()) is None
    assert generate_review_id(ReviewRecord(content="")) is None


def test_identical_triples_share_an_id():
    a = ReviewRecord(username=ReviewAuthor(text="jane"), title="Great", date="May 1, 2024")
    b = ReviewRecord(
        username=ReviewAuthor(text="jane", href="https://example.org"),
        title="Great",
        date="May 1, 2024",
        content="Different body",
        rating=1,
    )
    c = ReviewRecord(username=ReviewAuthor(text="jane"), title="Great", date="May 2, 2024")

    assert generate_review_id(a) == generate_review_id(b)
    assert generate_review_id(a) != generate_review_id(c)
