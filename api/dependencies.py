"""
FastAPI dependencies for the geo-gateway API.

Provides the shared provider registry, review aggregator, place search
client, and API key checks. Singletons live for the life of the process so
the review caches are shared across requests.
"""

import logging
import uuid
from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException

from api.config import settings
from geo_gateway.core.utils import mask_secret
from geo_gateway.geocoding import ProviderRegistry, default_registry
from geo_gateway.places import PlaceSearchClient
from geo_gateway.reviews import GoogleReviewsProvider, ReviewAggregator

logger = logging.getLogger(__name__)


@lru_cache()
def get_registry() -> ProviderRegistry:
    """
    Geocoding providers in priority order, as a FastAPI dependency.

    Usage:
        @router.post("/geocode")
        async def geocode(registry: ProviderRegistry = Depends(get_registry)):
            return await registry.resolve("...")
    """
    return default_registry()


@lru_cache()
def get_review_aggregator() -> ReviewAggregator:
    return ReviewAggregator(GoogleReviewsProvider())


@lru_cache()
def get_place_search_client() -> PlaceSearchClient:
    return PlaceSearchClient()


def new_request_id() -> str:
    """Short id for correlating the log lines of one request."""
    return uuid.uuid4().hex[:8]


def is_valid_api_key(api_key: Optional[str]) -> bool:
    if not api_key:
        return False
    return api_key in settings.allowed_api_keys()


def require_api_key(x_api_key: Optional[str] = Header(None)) -> str:
    """
    Reject requests whose x-api-key header is not on the allow list.

    Usage:
        @router.post("/data")
        async def create_data(api_key: str = Depends(require_api_key)):
            ...
    """
    if not is_valid_api_key(x_api_key):
        logger.warning(f"Unauthorized request - invalid API key {mask_secret(x_api_key)}")
        raise HTTPException(
            status_code=401,
            detail="Unauthorized - Invalid API key",
        )
    return x_api_key


def require_api_key_or_default(x_api_key: Optional[str] = Header(None)) -> str:
    """Like require_api_key, but falls back to DEFAULT_API_KEY when the header is absent."""
    return require_api_key(x_api_key or settings.default_api_key() or None)
