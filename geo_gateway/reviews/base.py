"""
Canonical review types and the review provider contract.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from geo_gateway.geocoding.base import ProviderError, RateLimit

# (author, timestamp): the upstream has no stable review id
IdentityKey = Tuple[str, str]


class SortOrder(str, Enum):
    """Upstream review sort orders, in rotation order."""
    MOST_RELEVANT = "most_relevant"
    NEWEST = "newest"
    HIGHEST_RATING = "highest_rating"

    @classmethod
    def rotation(cls) -> List["SortOrder"]:
        return [cls.MOST_RELEVANT, cls.NEWEST, cls.HIGHEST_RATING]


@dataclass(frozen=True)
class Review:
    """A single published review."""

    author: str
    rating: int
    text: str
    time: str  # ISO-8601
    author_photo: Optional[str] = None
    relative_time: Optional[str] = None
    language: Optional[str] = None
    raw: Optional[Any] = field(default=None, compare=False, repr=False)

    @property
    def identity_key(self) -> IdentityKey:
        return (self.author, self.time)

    def as_dict(self, include_raw: bool = True) -> dict:
        data = {
            "author": self.author,
            "authorProfilePhoto": self.author_photo,
            "rating": self.rating,
            "text": self.text,
            "time": self.time,
            "relativeTime": self.relative_time,
            "language": self.language,
        }
        data = {k: v for k, v in data.items() if v is not None}
        if include_raw:
            data["raw"] = self.raw
        return data


@dataclass(frozen=True)
class PlaceSummary:
    """Upstream place metadata; total_reviews may exceed what is retrievable."""

    name: str
    rating: float
    total_reviews: int
    url: Optional[str] = None

    @property
    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "rating": self.rating,
            "totalReviews": self.total_reviews,
            "url": self.url,
        }


@dataclass(frozen=True)
class Pagination:
    """
    Page metadata.

    In standard mode every count is exact over the deduplicated, filtered
    set. In chunked mode only page_size and the upstream's estimated
    total_reviews are known.
    """

    has_more_reviews: bool
    next_page_token: Optional[str] = None
    current_page: Optional[int] = None
    total_pages: Optional[int] = None
    page_size: Optional[int] = None
    total_reviews: Optional[int] = None
    total_is_estimate: bool = False

    @property
    def as_dict(self) -> dict:
        data = {
            "nextPageToken": self.next_page_token,
            "hasMoreReviews": self.has_more_reviews,
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "pageSize": self.page_size,
            "totalReviews": self.total_reviews,
        }
        data = {k: v for k, v in data.items() if v is not None}
        if self.total_is_estimate:
            data["totalReviewsIsEstimate"] = True
        return data


@dataclass(frozen=True)
class ReviewPage:
    """Response envelope for one page of reviews."""

    success: bool
    provider: str
    results: Tuple[Review, ...] = ()
    summary: Optional[PlaceSummary] = None
    pagination: Optional[Pagination] = None
    error: Optional[ProviderError] = None

    @classmethod
    def failure(cls, provider: str, code: str, message: str) -> "ReviewPage":
        return cls(success=False, provider=provider, error=ProviderError(code, message))

    def as_dict(self, include_raw: bool = True) -> dict:
        data = {
            "success": self.success,
            "provider": self.provider,
            "results": [r.as_dict(include_raw=include_raw) for r in self.results],
        }
        if self.summary is not None:
            data["summary"] = self.summary.as_dict
        if self.pagination is not None:
            data["pagination"] = self.pagination.as_dict
        if self.error is not None:
            data["error"] = self.error.as_dict
        return data


@dataclass(frozen=True)
class ReviewFetch:
    """Reviews returned by a single upstream call under one sort order."""

    success: bool
    reviews: Tuple[Review, ...] = ()
    error: Optional[ProviderError] = None


@dataclass(frozen=True)
class PlaceDetails:
    """Outcome of a place-summary lookup."""

    success: bool
    summary: Optional[PlaceSummary] = None
    error: Optional[ProviderError] = None


@dataclass(frozen=True)
class ReviewOptions:
    page_size: Optional[int] = None
    language: Optional[str] = None
    minimum_rating: Optional[float] = None
    cursor: Optional[str] = None


@runtime_checkable
class ReviewsProvider(Protocol):
    """Contract for a review-capable upstream adapter."""

    name: str

    async def get_place_details(self, place_id: str, language: str) -> PlaceDetails:
        ...

    async def fetch_reviews(self, place_id: str, language: str, sort: SortOrder) -> ReviewFetch:
        ...

    async def is_available(self) -> bool:
        ...

    def rate_limit(self) -> RateLimit:
        ...


def dedupe_reviews(reviews: Iterable[Review]) -> List[Review]:
    """Drop repeated (author, time) pairs, keeping first-seen order."""
    seen = set()
    unique = []
    for review in reviews:
        key = review.identity_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(review)
    return unique


def filter_by_rating(reviews: Sequence[Review], minimum_rating: Optional[float]) -> List[Review]:
    if minimum_rating is None:
        return list(reviews)
    return [r for r in reviews if r.rating >= minimum_rating]
