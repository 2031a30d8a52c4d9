# backend/app/services/wporg_client.py
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from backend.app.core.result import FetchResult
from backend.app.db.schemas import RatingInfo, ReviewRecord
from .review_parser import parse_reviews_html

# Heavy plugin_information fields we never need.
_DISABLED_FIELDS = (
    "description",
    "short_description",
    "installation",
    "faq",
    "changelog",
    "screenshots",
    "versions",
    "banners",
    "icons",
    "contributors",
    "donate_link",
    "tags",
    "compatibility",
    "downloaded",
    "active_installs",
    "last_updated",
    "added",
    "homepage",
    "download_link",
)

REVIEW_FIELDS = {"sections": True, "reviews": True}
COUNT_FIELDS = {"num_ratings": True, "ratings": True, "sections": False, "reviews": False}
RATING_FIELDS = {
    "rating": True,
    "num_ratings": True,
    "ratings": True,
    "sections": False,
    "reviews": False,
}


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value)
            return True
        except ValueError:
            return False
    return False


def _to_count(value: Any) -> int:
    if not _is_numeric(value):
        return 0
    try:
        return abs(int(float(value)))
    except (ValueError, OverflowError):
        return 0


def parse_ratings(raw: Any) -> Dict[int, int]:
    """Normalise the star -> count mapping of a plugin_information response."""
    if not isinstance(raw, dict):
        return {}
    ratings: Dict[int, int] = {}
    for stars, count in raw.items():
        star_value = _to_count(stars)
        if star_value:
            ratings[star_value] = _to_count(count)
    return ratings


class WordPressOrgClient:
    """Thin client for the WordPress.org plugins ``plugin_information`` endpoint."""

    def __init__(
        self,
        api_url: str,
        locale: str = "en_US",
        timeout_seconds: float = 10.0,
        user_agent: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.api_url = api_url
        self.locale = locale
        headers = {"User-Agent": user_agent} if user_agent else None
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.Client(
            timeout=timeout_seconds, headers=headers, follow_redirects=True
        )
        logger.info(f"WordPressOrgClient initialised for {self.api_url} (locale: {self.locale})")

    def close(self):
        if self._owns_client:
            self.http_client.close()

    def _build_params(self, slug: str, fields: Dict[str, bool]) -> Dict[str, str]:
        params = {
            "action": "plugin_information",
            "request[slug]": slug,
            "request[locale]": self.locale,
        }
        for field in _DISABLED_FIELDS:
            params[f"request[fields][{field}]"] = "0"
        for field, enabled in fields.items():
            params[f"request[fields][{field}]"] = "1" if enabled else "0"
        return params

    def get_plugin_information(
        self, slug: str, fields: Dict[str, bool]
    ) -> FetchResult[Dict[str, Any]]:
        method_name = f"WordPressOrgClient.get_plugin_information(slug='{slug}')"
        logger.debug(f"{method_name}: requesting fields {sorted(k for k, v in fields.items() if v)}")

        try:
            response = self.http_client.get(self.api_url, params=self._build_params(slug, fields))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"{method_name}: HTTP {e.response.status_code} from WordPress.org.")
            return FetchResult.failure(
                "http_status_error", f"WordPress.org returned HTTP {e.response.status_code}."
            )
        except httpx.HTTPError as e:
            logger.warning(f"{method_name}: request failed: {e}")
            return FetchResult.failure("http_request_failed", str(e) or type(e).__name__)

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"{method_name}: invalid JSON in response: {e}")
            return FetchResult.failure("plugins_api_invalid_response", "Invalid JSON response.")

        if not isinstance(payload, dict):
            logger.warning(f"{method_name}: unexpected payload type {type(payload).__name__}.")
            return FetchResult.failure("plugins_api_invalid_response", "Unexpected response shape.")

        if payload.get("error"):
            logger.warning(f"{method_name}: WordPress.org error: {payload['error']}")
            return FetchResult.failure("plugins_api_failed", str(payload["error"]))

        return FetchResult.success(payload)

    def fetch_reviews(self, slug: str) -> FetchResult[List[ReviewRecord]]:
        result = self.get_plugin_information(slug, REVIEW_FIELDS)
        if not result.ok:
            return FetchResult(error=result.error)

        sections = result.value.get("sections")
        reviews_html = sections.get("reviews") if isinstance(sections, dict) else None
        reviews = parse_reviews_html(reviews_html)
        logger.info(f"Fetched {len(reviews)} review(s) for plugin '{slug}'.")
        return FetchResult.success(reviews)

    def fetch_total_count(self, slug: str) -> FetchResult[int]:
        result = self.get_plugin_information(slug, COUNT_FIELDS)
        if not result.ok:
            return FetchResult(error=result.error)

        total_count = _to_count(result.value.get("num_ratings"))
        if total_count == 0:
            total_count = sum(parse_ratings(result.value.get("ratings")).values())
        return FetchResult.success(total_count)

    def fetch_rating_info(self, slug: str) -> FetchResult[RatingInfo]:
        result = self.get_plugin_information(slug, RATING_FIELDS)
        if not result.ok:
            return FetchResult(error=result.error)

        payload = result.value
        rating = payload.get("rating")
        return FetchResult.success(
            RatingInfo(
                average_rating=float(rating) if _is_numeric(rating) else 0.0,
                total_ratings=_to_count(payload.get("num_ratings")),
                ratings=parse_ratings(payload.get("ratings")),
            )
        )
