"""Shared fixtures for the WordPress.org reviews test-suite."""

import os
from pathlib import Path

os.environ.setdefault(
    "WPPR_SETTINGS_FILE", str(Path(__file__).resolve().parent / "settings.test.yaml")
)

import pytest

from backend.app.core.caching import FileCache
from backend.app.core.memory_cache import MemoryCache
from backend.app.core.options import OptionsStore
from backend.app.core.result import FetchResult
from backend.app.core.tiered_cache import TieredCache
from backend.app.db.schemas import RatingInfo
from backend.app.services.review_cache import PluginReviewCache
from backend.app.services.review_parser import parse_reviews_html

REVIEWS_HTML = """
<div class="review">
  <div class="review-head">
    <div class="reviewer-info">
      <div class="review-title-section">
        <h4 class="review-title">Works great</h4>
        <div class="star-rating">
          <div class="wporg-ratings" aria-label="5 out of 5 stars" data-title-template="%s out of 5 stars" data-rating="5" style="color:#ffb900;"></div>
        </div>
      </div>
      <p class="reviewer">
        By <a href="https://profiles.wordpress.org/jane/"><img alt="Jane avatar" src="https://secure.gravatar.com/avatar/abc?s=16&amp;d=monsterid&amp;r=g" class="avatar avatar-16 photo" height="16" width="16" loading="lazy"></a><a href="https://profiles.wordpress.org/jane/" class="reviewer-name">jane</a> on <span class="review-date">July 21, 2025</span>
      </p>
    </div>
  </div>
  <div class="review-body">Does exactly what it says &amp; more.</div>
</div>
<div class="review">
  <div class="review-head">
    <div class="reviewer-info">
      <div class="review-title-section">
        <h4 class="review-title">Support could be better</h4>
        <div class="star-rating">
          <div class="wporg-ratings" data-rating="3"></div>
        </div>
      </div>
      <p class="reviewer">
        By <a href="https://profiles.wordpress.org/bob/"><img alt="" src="https://secure.gravatar.com/avatar/def?s=16" class="avatar avatar-16 photo"></a><a href="https://profiles.wordpress.org/bob/" class="reviewer-name">bob</a> on <span class="review-date">June 2, 2025</span>
      </p>
    </div>
  </div>
  <div class="review-body">Took a week to get an answer.</div>
</div>
"""

SAMPLE_RATINGS = {5: 10, 4: 2, 1: 1}


class FakeClock:
    def __init__(self, start: float = 1_750_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeWordPressOrgClient:
    """Stands in for WordPressOrgClient and counts every remote fetch."""

    def __init__(self, reviews_html: str = REVIEWS_HTML, ratings=None, num_ratings: int = 0):
        self.reviews_result = FetchResult.success(parse_reviews_html(reviews_html))
        ratings = dict(SAMPLE_RATINGS if ratings is None else ratings)
        self.rating_result = FetchResult.success(
            RatingInfo(average_rating=92.0, total_ratings=num_ratings, ratings=ratings)
        )
        self.count_result = FetchResult.success(num_ratings or sum(ratings.values()))
        self.calls = {"reviews": [], "count": [], "rating": []}

    def fetch_reviews(self, slug):
        self.calls["reviews"].append(slug)
        return self.reviews_result

    def fetch_total_count(self, slug):
        self.calls["count"].append(slug)
        return self.count_result

    def fetch_rating_info(self, slug):
        self.calls["rating"].append(slug)
        return self.rating_result

    def total_calls(self) -> int:
        return sum(len(c) for c in self.calls.values())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def durable_cache(tmp_path, clock):
    return FileCache(tmp_path / "durable", timer=clock)


@pytest.fixture
def tiered_cache(durable_cache, clock):
    return TieredCache(fast=MemoryCache(maxsize=128, timer=clock), durable=durable_cache)


@pytest.fixture
def options_store(tmp_path):
    return OptionsStore(tmp_path / "options", default_duration_hours=24)


@pytest.fixture
def fake_client():
    return FakeWordPressOrgClient()


@pytest.fixture
def review_cache(fake_client, tiered_cache, options_store):
    return PluginReviewCache(
        client=fake_client,
        cache=tiered_cache,
        long_ttl=options_store.cache_duration_seconds,
        short_ttl=3600,
    )
