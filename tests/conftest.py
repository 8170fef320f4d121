"""
Shared fixtures and fakes. No test touches the network: adapters are
exercised by patching their HTTP seam, everything above them runs against
in-memory fakes.
"""

from typing import Dict, List, Optional, Sequence

import pytest

from geo_gateway.geocoding.base import (
    GeocodeOptions,
    GeocodeOutcome,
    GeocodeResult,
    ProviderError,
    RateLimit,
)
from geo_gateway.reviews.base import (
    PlaceDetails,
    PlaceSummary,
    Review,
    ReviewFetch,
    SortOrder,
)


def outcome_shape(outcome: GeocodeOutcome) -> Dict[str, List[str]]:
    """Field names and value types of a serialized outcome."""
    data = outcome.as_dict(include_raw=False)
    shape: Dict[str, List[str]] = {
        "outcome": sorted(f"{k}:{type(v).__name__}" for k, v in data.items() if k != "error"),
    }
    for result in data["results"]:
        shape.setdefault(
            "result",
            sorted(f"{k}:{type(v).__name__}" for k, v in result.items()),
        )
    return shape


def make_review(index: int, rating: int = 5, author: Optional[str] = None) -> Review:
    return Review(
        author=author or f"Reviewer {index}",
        rating=rating,
        text=f"Review text {index}",
        time=f"2024-01-{(index % 28) + 1:02d}T12:00:{index % 60:02d}.000Z",
    )


class FakeGeocoder:
    """Scripted geocoding provider that records its calls."""

    def __init__(
        self,
        name: str,
        outcome: Optional[GeocodeOutcome] = None,
        available: bool = True,
        raises: Optional[Exception] = None,
        probe_raises: Optional[Exception] = None,
    ):
        self.name = name
        self.outcome = outcome or GeocodeOutcome.ok(name)
        self.available = available
        self.raises = raises
        self.probe_raises = probe_raises
        self.geocode_calls: List[str] = []
        self.probe_calls = 0

    async def geocode(self, address: str, options: Optional[GeocodeOptions] = None) -> GeocodeOutcome:
        self.geocode_calls.append(address)
        if self.raises:
            raise self.raises
        return self.outcome

    async def is_available(self) -> bool:
        self.probe_calls += 1
        if self.probe_raises:
            raise self.probe_raises
        return self.available

    def rate_limit(self) -> RateLimit:
        return RateLimit(requests=10, period_ms=1000)


class FakeReviewsProvider:
    """Review provider serving fixed slices per sort order."""

    name = "google"

    def __init__(
        self,
        by_sort: Dict[SortOrder, Sequence[Review]],
        summary: Optional[PlaceSummary] = None,
        details_error: Optional[ProviderError] = None,
        failing_sorts: Sequence[SortOrder] = (),
        available: bool = True,
    ):
        self.by_sort = by_sort
        self.summary = summary or PlaceSummary(
            name="Test Place", rating=4.5, total_reviews=120, url="https://maps.example/test",
        )
        self.details_error = details_error
        self.failing_sorts = set(failing_sorts)
        self.available = available
        self.fetch_calls: List[SortOrder] = []
        self.details_calls = 0

    async def get_place_details(self, place_id: str, language: str) -> PlaceDetails:
        self.details_calls += 1
        if self.details_error:
            return PlaceDetails(success=False, error=self.details_error)
        return PlaceDetails(success=True, summary=self.summary)

    async def fetch_reviews(self, place_id: str, language: str, sort: SortOrder) -> ReviewFetch:
        self.fetch_calls.append(sort)
        if sort in self.failing_sorts:
            return ReviewFetch(success=False, error=ProviderError("UNKNOWN", f"{sort.value} failed"))
        return ReviewFetch(success=True, reviews=tuple(self.by_sort.get(sort, ())))

    async def is_available(self) -> bool:
        return self.available

    def rate_limit(self) -> RateLimit:
        return RateLimit(requests=10, period_ms=1000)


@pytest.fixture
def census_match() -> dict:
    return {
        "matchedAddress": "1600 PENNSYLVANIA AVE NW, WASHINGTON, DC, 20500",
        "coordinates": {"x": -77.03535, "y": 38.898754},
        "addressComponents": {
            "preDirectional": "",
            "streetName": "PENNSYLVANIA",
            "streetNamePostType": "AVE",
            "city": "WASHINGTON",
            "state": "DC",
            "zip": "20500",
        },
    }


@pytest.fixture
def google_result() -> dict:
    return {
        "formatted_address": "1600 Pennsylvania Avenue NW, Washington, DC 20500, USA",
        "geometry": {"location": {"lat": 38.8976763, "lng": -77.0365298}},
        "address_components": [
            {"long_name": "Pennsylvania Avenue Northwest", "types": ["route"]},
            {"long_name": "Washington", "types": ["locality", "political"]},
            {"long_name": "District of Columbia", "types": ["administrative_area_level_1"]},
            {"long_name": "United States", "types": ["country", "political"]},
            {"long_name": "20500", "types": ["postal_code"]},
        ],
    }


@pytest.fixture
def sixteen_reviews() -> Dict[SortOrder, List[Review]]:
    """Three overlapping sort-order slices covering 16 unique reviews."""
    relevant = [make_review(i, rating=(i % 5) + 1) for i in range(0, 7)]
    newest = [make_review(i, rating=(i % 5) + 1) for i in range(5, 12)]
    highest = [make_review(i, rating=(i % 5) + 1) for i in range(10, 16)]
    return {
        SortOrder.MOST_RELEVANT: relevant,
        SortOrder.NEWEST: newest,
        SortOrder.HIGHEST_RATING: highest,
    }


def success_outcome(provider: str, lat: float = 38.8977, lng: float = -77.0365) -> GeocodeOutcome:
    return GeocodeOutcome.ok(provider, [
        GeocodeResult(latitude=lat, longitude=lng, formatted_address="Somewhere", confidence=1.0),
    ])
