"""
Endpoint tests for the WordPress.org reviews API.

Shared collaborators (data manager, options store, cache tiers) are swapped
for test instances through FastAPI dependency overrides, so no database or
network access happens.
"""

import pytest
from fastapi.testclient import TestClient

from backend.app.main import app
from backend.app.core.result import FetchResult
from backend.app.db import products as db_products
from backend.app.db.schemas import NativeRatings
from backend.app.services.data_manager import (
    ReviewDataManager,
    get_options_store,
    get_review_data_manager,
    get_tiered_cache,
)

SLUGS = {42: "example-plugin"}


@pytest.fixture
def slugs():
    return dict(SLUGS)


@pytest.fixture
def client(review_cache, tiered_cache, options_store, slugs):
    def manager_override():
        return ReviewDataManager(
            review_cache=review_cache,
            slug_lookup=slugs.get,
            native_ratings_lookup=lambda product_id: NativeRatings(sum=9, count=2),
        )

    app.dependency_overrides[get_review_data_manager] = manager_override
    app.dependency_overrides[get_options_store] = lambda: options_store
    app.dependency_overrides[get_tiered_cache] = lambda: tiered_cache
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_product_reviews(client):
    response = client.get("/api/v1/products/42/wporg-reviews")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["plugin_slug"] == "example-plugin"
    assert body["tab_title"] == "WordPress.org Reviews (13)"
    assert body["reviews_url"].endswith("/example-plugin/reviews")
    assert body["total_count"] == 13
    assert [c["author"] for c in body["comments"]] == ["jane", "bob"]
    assert len(body["comment_ratings"]) == 2


def test_product_without_slug_is_unavailable(client):
    body = client.get("/api/v1/products/7/wporg-reviews").json()

    assert body["status"] == "unavailable"
    assert body["message"] == "Unable to load WordPress.org reviews at this time."
    assert body["comments"] == []


def test_product_with_no_reviews_is_empty(client, fake_client):
    fake_client.reviews_result = FetchResult.success([])

    body = client.get("/api/v1/products/42/wporg-reviews").json()

    assert body["status"] == "empty"
    assert body["message"] == "No WordPress.org reviews found for this plugin."


def test_rating_summary(client):
    payload = {"review_count": 2, "average_rating": "4.50", "rating_counts": {"5": 1, "4": 1}}

    response = client.post("/api/v1/products/42/rating-summary", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["has_data"] is True
    assert body["review_count"] == 15
    assert body["native_review_count"] == 2
    assert body["average_rating"] == "4.53"
    assert body["rating_counts"] == {"5": 11, "4": 3, "1": 1}


def test_rating_summary_strips_remote_total_from_merged_count(client):
    payload = {"review_count": 15, "average_rating": "4.50", "includes_remote": True}

    body = client.post("/api/v1/products/42/rating-summary", json=payload).json()

    assert body["native_review_count"] == 2
    assert body["review_count"] == 15


def test_rating_summary_without_plugin_keeps_native_figures(client):
    payload = {"review_count": 2, "average_rating": "4.50", "rating_counts": {"5": 1}}

    body = client.post("/api/v1/products/7/rating-summary", json=payload).json()

    assert body["has_data"] is False
    assert body["review_count"] == 2
    assert body["average_rating"] == "4.50"
    assert body["rating_counts"] == {"5": 1}


def test_comment_rating(client):
    comments = client.get("/api/v1/products/42/wporg-reviews").json()["comments"]
    comment_id = comments[0]["comment_id"]

    response = client.get(f"/api/v1/products/42/comments/{comment_id}/rating")

    assert response.status_code == 200
    assert response.json() == {"comment_id": comment_id, "rating": 5}


def test_unknown_comment_rating_is_404(client):
    assert client.get("/api/v1/products/42/comments/1/rating").status_code == 404


def test_clear_product_cache(client, fake_client):
    client.get("/api/v1/products/42/wporg-reviews")

    response = client.delete("/api/v1/products/42/wporg-cache")
    client.get("/api/v1/products/42/wporg-reviews")

    assert response.status_code == 200
    assert response.json()["plugin_slug"] == "example-plugin"
    assert len(fake_client.calls["reviews"]) == 2


def test_clear_cache_for_unlinked_product_is_404(client):
    assert client.delete("/api/v1/products/7/wporg-cache").status_code == 404


def test_update_plugin_slug(client, slugs, monkeypatch):
    def fake_set(product_id, slug):
        slugs[product_id] = slug
        return True

    monkeypatch.setattr(db_products, "set_plugin_slug_db", fake_set)
    monkeypatch.setattr(db_products, "get_plugin_slug_db", slugs.get)

    response = client.put("/api/v1/products/7/plugin-slug", json={"plugin_slug": "new-plugin"})

    assert response.status_code == 200
    assert response.json()["plugin_slug"] == "new-plugin"
    assert client.get("/api/v1/products/7/wporg-reviews").json()["plugin_slug"] == "new-plugin"


def test_update_plugin_slug_failure_is_500(client, monkeypatch):
    monkeypatch.setattr(db_products, "set_plugin_slug_db", lambda product_id, slug: False)

    response = client.put("/api/v1/products/42/plugin-slug", json={"plugin_slug": "x"})

    assert response.status_code == 500


def test_read_default_settings(client):
    body = client.get("/api/v1/settings").json()

    assert body["cache_duration_hours"] == 24
    assert body["clear_cache"] is False


def test_update_settings_persists_duration(client, options_store):
    response = client.put("/api/v1/settings", json={"cache_duration_hours": 6})

    assert response.status_code == 200
    assert response.json()["cache_duration_hours"] == 6
    assert response.json()["cache_cleared"] is False
    assert options_store.cache_duration_seconds() == 6 * 3600


def test_update_settings_rejects_out_of_range_duration(client):
    assert client.put("/api/v1/settings", json={"cache_duration_hours": 0}).status_code == 422
    assert client.put("/api/v1/settings", json={"cache_duration_hours": 169}).status_code == 422


def test_clear_all_caches_through_settings(client, fake_client, options_store):
    client.get("/api/v1/products/42/wporg-reviews")

    body = client.put("/api/v1/settings", json={"clear_cache": True}).json()
    client.get("/api/v1/products/42/wporg-reviews")

    assert body["cache_cleared"] is True
    assert body["clear_cache"] is False
    assert body["message"].startswith("All WordPress.org plugin review caches")
    assert options_store.load().clear_cache is False
    assert len(fake_client.calls["reviews"]) == 2
