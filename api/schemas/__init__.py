"""
Pydantic schemas for API request/response models.
"""

from api.schemas.requests import (
    GeocodeRequest,
    PlaceSearchRequest,
    ReviewsRequest,
)
from api.schemas.responses import (
    ErrorResponse,
    GeocodeResponse,
    HealthResponse,
    PlaceSearchResponse,
    ReviewsResponse,
)

__all__ = [
    "GeocodeRequest",
    "PlaceSearchRequest",
    "ReviewsRequest",
    "ErrorResponse",
    "GeocodeResponse",
    "HealthResponse",
    "PlaceSearchResponse",
    "ReviewsResponse",
]
