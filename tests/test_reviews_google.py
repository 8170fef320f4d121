from unittest.mock import AsyncMock, patch

import httpx
import pytest

from geo_gateway.reviews.base import ReviewsProvider, SortOrder
from geo_gateway.reviews.google import (
    GoogleReviewsProvider,
    place_url_fallback,
    to_iso_timestamp,
    transform_review,
)

GET = "geo_gateway.reviews.google.GoogleReviewsProvider._get"

RAW_REVIEW = {
    "author_name": "Alice",
    "profile_photo_url": "https://example.com/alice.png",
    "rating": 5,
    "text": "Great coffee",
    "time": 1704067200,
    "relative_time_description": "a year ago",
    "language": "en",
}


def test_to_iso_timestamp():
    assert to_iso_timestamp(1704067200) == "2024-01-01T00:00:00.000Z"


def test_transform_review():
    review = transform_review(RAW_REVIEW)
    assert review.author == "Alice"
    assert review.rating == 5
    assert review.time == "2024-01-01T00:00:00.000Z"
    assert review.identity_key == ("Alice", "2024-01-01T00:00:00.000Z")
    assert review.as_dict(include_raw=False) == {
        "author": "Alice",
        "authorProfilePhoto": "https://example.com/alice.png",
        "rating": 5,
        "text": "Great coffee",
        "time": "2024-01-01T00:00:00.000Z",
        "relativeTime": "a year ago",
        "language": "en",
    }


def test_provider_satisfies_protocol():
    assert isinstance(GoogleReviewsProvider(api_key="k"), ReviewsProvider)


@pytest.mark.asyncio
async def test_get_place_details():
    responses = [
        {"status": "OK", "result": {"name": "Cafe", "rating": 4.6, "user_ratings_total": 250}},
        {"status": "OK", "result": {"url": "https://maps.google.com/?cid=123"}},
    ]
    with patch(GET, new=AsyncMock(side_effect=responses)):
        details = await GoogleReviewsProvider(api_key="k").get_place_details("ChIJabc", "en")

    assert details.success
    assert details.summary.name == "Cafe"
    assert details.summary.rating == 4.6
    assert details.summary.total_reviews == 250
    assert details.summary.url == "https://maps.google.com/?cid=123"


@pytest.mark.asyncio
async def test_place_details_defaults_and_url_fallback():
    responses = [
        {"status": "OK", "result": {"name": "New Place"}},
        httpx.ConnectError("refused"),
    ]
    with patch(GET, new=AsyncMock(side_effect=responses)):
        details = await GoogleReviewsProvider(api_key="k").get_place_details("ChIJnew", "en")

    assert details.summary.rating == 0
    assert details.summary.total_reviews == 0
    assert details.summary.url == place_url_fallback("ChIJnew")
    assert details.summary.url == "https://www.google.com/maps/place/?q=place_id:ChIJnew"


@pytest.mark.asyncio
async def test_place_details_non_ok_status_is_failure():
    payload = {"status": "INVALID_REQUEST", "error_message": "Invalid place id"}
    with patch(GET, new=AsyncMock(return_value=payload)):
        details = await GoogleReviewsProvider(api_key="k").get_place_details("bad", "en")

    assert not details.success
    assert details.error.code == "INVALID_REQUEST"
    assert "Invalid place id" in details.error.message


@pytest.mark.asyncio
async def test_missing_key():
    mock_get = AsyncMock()
    with patch(GET, new=mock_get):
        provider = GoogleReviewsProvider(api_key="")
        details = await provider.get_place_details("ChIJabc", "en")
        fetch = await provider.fetch_reviews("ChIJabc", "en", SortOrder.NEWEST)
        available = await provider.is_available()

    assert details.error.code == "API_KEY_MISSING"
    assert fetch.error.code == "API_KEY_MISSING"
    assert available is False
    mock_get.assert_not_called()


@pytest.mark.asyncio
async def test_fetch_reviews_passes_sort_and_skips_malformed():
    payload = {"status": "OK", "result": {"reviews": [RAW_REVIEW, {"author_name": "Bad", "time": "not-a-time"}]}}
    mock_get = AsyncMock(return_value=payload)
    with patch(GET, new=mock_get):
        fetch = await GoogleReviewsProvider(api_key="k").fetch_reviews("ChIJabc", "fr", SortOrder.HIGHEST_RATING)

    assert fetch.success
    assert [r.author for r in fetch.reviews] == ["Alice"]
    params = mock_get.call_args.args[0]
    assert params["reviews_sort"] == "highest_rating"
    assert params["language"] == "fr"
    assert params["fields"] == "reviews"


@pytest.mark.asyncio
async def test_fetch_reviews_non_ok_status_is_empty_success():
    with patch(GET, new=AsyncMock(return_value={"status": "NOT_FOUND"})):
        fetch = await GoogleReviewsProvider(api_key="k").fetch_reviews("ChIJabc", "en", SortOrder.NEWEST)

    assert fetch.success
    assert fetch.reviews == ()


@pytest.mark.asyncio
async def test_fetch_reviews_transport_error_is_failure():
    with patch(GET, new=AsyncMock(side_effect=httpx.ReadTimeout("slow"))):
        fetch = await GoogleReviewsProvider(api_key="k").fetch_reviews("ChIJabc", "en", SortOrder.NEWEST)

    assert not fetch.success
    assert fetch.error.code == "UNKNOWN"


@pytest.mark.asyncio
async def test_is_available_probes_place_details():
    responses = [
        {"status": "OK", "result": {"name": "Probe", "rating": 4, "user_ratings_total": 3}},
        {"status": "OK", "result": {}},
    ]
    with patch(GET, new=AsyncMock(side_effect=responses)):
        assert await GoogleReviewsProvider(api_key="k").is_available() is True

    with patch(GET, new=AsyncMock(return_value={"status": "REQUEST_DENIED"})):
        assert await GoogleReviewsProvider(api_key="k").is_available() is False
