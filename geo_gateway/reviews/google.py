"""
Google Places review provider.

Place Details returns at most ~5 reviews per call and has no pagination, so
the aggregator queries it once per sort order and merges the slices.
https://developers.google.com/maps/documentation/places/web-service/details
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from geo_gateway.core import settings
from geo_gateway.geocoding.base import ProviderError, RateLimit
from geo_gateway.reviews.base import (
    PlaceDetails,
    PlaceSummary,
    Review,
    ReviewFetch,
    SortOrder,
)

logger = logging.getLogger(__name__)

# Above this the upstream exposes only a fraction of the reviews
LARGE_REVIEW_COUNT = 20


def to_iso_timestamp(epoch_seconds) -> str:
    """Epoch seconds -> ISO-8601 UTC with milliseconds, e.g. 2024-01-31T12:00:00.000Z"""
    moment = datetime.fromtimestamp(float(epoch_seconds), tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def transform_review(review: dict) -> Review:
    return Review(
        author=review.get("author_name", ""),
        author_photo=review.get("profile_photo_url"),
        rating=int(review.get("rating", 0)),
        text=review.get("text", ""),
        time=to_iso_timestamp(review.get("time", 0)),
        relative_time=review.get("relative_time_description"),
        language=review.get("language"),
        raw=review,
    )


def place_url_fallback(place_id: str) -> str:
    return f"https://www.google.com/maps/place/?q=place_id:{place_id}"


class GoogleReviewsProvider:
    """
    Review adapter over the Google Places Details endpoint.

    Usage:
        provider = GoogleReviewsProvider()  # Uses GOOGLE_MAPS_API_KEY from env
        details = await provider.get_place_details("ChIJ...", "en")
        fetch = await provider.fetch_reviews("ChIJ...", "en", SortOrder.NEWEST)
    """

    name = "google"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        probe_place_id: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self.url = settings.GOOGLE_PLACE_DETAILS_URL
        self.probe_place_id = probe_place_id or settings.REVIEWS_PROBE_PLACE_ID

        if not self.api_key:
            logger.warning(
                "GOOGLE_MAPS_API_KEY is not set. Google reviews provider will not function."
            )

    def rate_limit(self) -> RateLimit:
        return RateLimit(
            requests=settings.GOOGLE_PLACES_RATE_LIMIT,
            period_ms=settings.RATE_LIMIT_PERIOD_MS,
        )

    async def get_place_details(self, place_id: str, language: str) -> PlaceDetails:
        """
        Fetch name, aggregate rating, review count and map URL for a place.

        Returns:
            PlaceDetails with a summary, or with an error when the upstream
            rejects the place id or the key is missing
        """
        if not self.api_key:
            return PlaceDetails(
                success=False,
                error=ProviderError("API_KEY_MISSING", "Google Maps API key is not configured"),
            )

        try:
            basic = await self._get({
                "place_id": place_id,
                "language": language,
                "fields": "name,rating,user_ratings_total,formatted_address",
            })
        except httpx.HTTPStatusError as e:
            return PlaceDetails(
                success=False,
                error=ProviderError(str(e.response.status_code), str(e)),
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Google: Error fetching place details for {place_id}: {e}")
            return PlaceDetails(
                success=False,
                error=ProviderError("UNKNOWN", str(e) or "Unknown error occurred"),
            )

        status = basic.get("status")
        if status != "OK":
            message = f"Fetching place details failed: {status}"
            if basic.get("error_message"):
                message += f" - {basic['error_message']}"
            logger.error(f"Google: {message} ({place_id})")
            return PlaceDetails(success=False, error=ProviderError(status or "UNKNOWN", message))

        result = basic.get("result") or {}
        total = result.get("user_ratings_total")
        rating = result.get("rating")

        if isinstance(total, int) and total > LARGE_REVIEW_COUNT:
            logger.warning(
                f"Place {place_id} has {total} reviews, but the Places API "
                f"returns only ~15 of them across all sort orders"
            )

        summary = PlaceSummary(
            name=result.get("name") or "",
            rating=rating if isinstance(rating, (int, float)) else 0,
            total_reviews=total if isinstance(total, int) else 0,
            url=await self._fetch_place_url(place_id, language),
        )
        return PlaceDetails(success=True, summary=summary)

    async def fetch_reviews(self, place_id: str, language: str, sort: SortOrder) -> ReviewFetch:
        """
        Fetch the reviews Google returns for one sort order (at most ~5).

        A non-OK upstream status yields an empty successful fetch; transport
        errors yield a failed fetch.
        """
        if not self.api_key:
            return ReviewFetch(
                success=False,
                error=ProviderError("API_KEY_MISSING", "Google Maps API key is not configured"),
            )

        try:
            data = await self._get({
                "place_id": place_id,
                "language": language,
                "fields": "reviews",
                "reviews_sort": SortOrder(sort).value,
            })
        except httpx.HTTPStatusError as e:
            logger.error(f"Google: HTTP {e.response.status_code} fetching reviews sort={sort.value}")
            return ReviewFetch(success=False, error=ProviderError(str(e.response.status_code), str(e)))
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Google: Error fetching reviews with sort={sort.value}: {e}")
            return ReviewFetch(
                success=False,
                error=ProviderError("UNKNOWN", str(e) or "Unknown error occurred"),
            )

        if data.get("status") != "OK":
            logger.warning(f"Fetching reviews with sort={sort.value} failed: {data.get('status')}")
            return ReviewFetch(success=True)

        raw_reviews = (data.get("result") or {}).get("reviews") or []
        reviews = []
        for raw in raw_reviews:
            try:
                reviews.append(transform_review(raw))
            except (TypeError, ValueError, OverflowError) as e:
                logger.warning(f"Skipping malformed review for {place_id}: {e}")

        logger.debug(f"Fetched {len(reviews)} reviews with sort={sort.value} for {place_id}")
        return ReviewFetch(success=True, reviews=tuple(reviews))

    async def is_available(self) -> bool:
        """Probe place details of a known place. Always False without an API key."""
        if not self.api_key:
            return False
        try:
            details = await self.get_place_details(self.probe_place_id, "en")
        except Exception as e:
            logger.error(f"Error checking provider availability: {e}")
            return False
        return details.success

    async def _fetch_place_url(self, place_id: str, language: str) -> str:
        try:
            data = await self._get({
                "place_id": place_id,
                "language": language,
                "fields": "url",
            })
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Google: Could not fetch map URL for {place_id}: {e}")
            return place_url_fallback(place_id)

        return (data.get("result") or {}).get("url") or place_url_fallback(place_id)

    async def _get(self, params: dict) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.url, params={**params, "key": self.api_key})
            response.raise_for_status()
            return response.json()
