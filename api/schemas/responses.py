"""
Response schemas for the geo-gateway API.

Routes return the core `as_dict()` payloads; these models document and
validate them. Field aliases carry the camelCase wire names.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(_WireModel):
    """Provider error carried on a response envelope."""

    code: str = Field(..., description="Provider-specific error code")
    message: str = Field(..., description="Human-readable message")


class ComponentsResponse(_WireModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = Field(None, alias="postalCode")


class GeocodeResultResponse(_WireModel):
    latitude: float
    longitude: float
    formatted_address: str = Field(..., alias="formattedAddress")
    confidence: float = Field(..., ge=0, le=1)
    components: ComponentsResponse
    raw: Optional[Any] = None


class GeocodeResponse(_WireModel):
    """Geocoding envelope; identical shape for every provider."""

    success: bool
    provider: str = Field(..., description="Provider name, or 'multiple' when all failed")
    results: List[GeocodeResultResponse] = Field(default_factory=list)
    error: Optional[ErrorResponse] = None


class ReviewResponse(_WireModel):
    author: str
    author_profile_photo: Optional[str] = Field(None, alias="authorProfilePhoto")
    rating: int
    text: str
    time: str = Field(..., description="ISO 8601 timestamp")
    relative_time: Optional[str] = Field(None, alias="relativeTime")
    language: Optional[str] = None
    raw: Optional[Any] = None


class SummaryResponse(_WireModel):
    name: str
    rating: float
    total_reviews: int = Field(..., alias="totalReviews")
    url: Optional[str] = None


class PaginationResponse(_WireModel):
    next_page_token: Optional[str] = Field(None, alias="nextPageToken")
    has_more_reviews: bool = Field(..., alias="hasMoreReviews")
    current_page: Optional[int] = Field(None, alias="currentPage")
    total_pages: Optional[int] = Field(None, alias="totalPages")
    page_size: Optional[int] = Field(None, alias="pageSize")
    total_reviews: Optional[int] = Field(None, alias="totalReviews")
    total_reviews_is_estimate: Optional[bool] = Field(None, alias="totalReviewsIsEstimate")


class ReviewsResponse(_WireModel):
    success: bool
    provider: str
    results: List[ReviewResponse] = Field(default_factory=list)
    summary: Optional[SummaryResponse] = None
    pagination: Optional[PaginationResponse] = None
    error: Optional[ErrorResponse] = None


class PlaceSearchResponse(_WireModel):
    status: str = Field(..., description="Upstream status, 'OK' or 'ZERO_RESULTS'")
    candidates: List[Dict[str, Any]] = Field(default_factory=list)


class HealthResponse(_WireModel):
    status: str
    providers: Dict[str, bool] = Field(default_factory=dict)
    timestamp: str = Field(..., description="ISO 8601 timestamp")
