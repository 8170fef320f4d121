"""
Health check endpoints.
"""

import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from api.config import settings
from api.dependencies import (
    get_registry,
    get_review_aggregator,
    require_api_key,
    require_api_key_or_default,
)
from api.schemas.responses import HealthResponse
from geo_gateway.geocoding import ProviderRegistry
from geo_gateway.reviews import ReviewAggregator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/")
async def root():
    """Static service info; no upstream calls."""
    return {
        "status": "ok",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "dependencies": {
            "google": settings.validate_google(),
        },
    }


async def _probe_providers(registry: ProviderRegistry, aggregator: ReviewAggregator) -> HealthResponse:
    geocoding, reviews_available = await asyncio.gather(
        registry.probe_all(),
        aggregator.is_available(),
    )
    providers = {f"{name}-geocoding": available for name, available in geocoding.items()}
    providers[f"{aggregator.name}-reviews"] = reviews_available

    logger.info(f"Health check: {providers}")
    return HealthResponse(
        status="ok",
        providers=providers,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


@router.get(f"{settings.API_PREFIX}/health", response_model=HealthResponse)
async def provider_health(
    api_key: str = Depends(require_api_key),
    registry: ProviderRegistry = Depends(get_registry),
    aggregator: ReviewAggregator = Depends(get_review_aggregator),
):
    """Live availability of every upstream provider."""
    return await _probe_providers(registry, aggregator)


@router.get("/health", response_model=HealthResponse)
async def health(
    api_key: str = Depends(require_api_key_or_default),
    registry: ProviderRegistry = Depends(get_registry),
    aggregator: ReviewAggregator = Depends(get_review_aggregator),
):
    """Same as the versioned health check, using DEFAULT_API_KEY when no key is sent."""
    return await _probe_providers(registry, aggregator)
