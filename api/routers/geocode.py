"""
Geocoding endpoint.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.config import settings
from api.dependencies import get_registry, new_request_id, require_api_key
from api.schemas.requests import GeocodeRequest
from api.schemas.responses import GeocodeResponse
from geo_gateway.core.utils import mask_secret
from geo_gateway.geocoding import ProviderRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.API_PREFIX, tags=["Geocoding"])

# Failures of a pinned provider that become HTTP errors instead of envelopes
EXPLICIT_PROVIDER_STATUS = {
    "PROVIDER_NOT_FOUND": (400, "Provider not found or not available"),
    "PROVIDER_UNAVAILABLE": (503, "Selected provider is not available"),
}


@router.post("/geocode", response_model=GeocodeResponse, response_model_exclude_none=True)
async def geocode(
    request: GeocodeRequest,
    api_key: str = Depends(require_api_key),
    registry: ProviderRegistry = Depends(get_registry),
):
    """
    Geocode an address.

    Without `provider`, providers are tried cheapest first and the first
    match wins. With `provider`, only that provider is used.
    """
    request_id = new_request_id()
    logger.info(
        f"[{request_id}] Geocode request from {mask_secret(api_key)} "
        f"(provider: {request.provider or 'auto'})"
    )

    outcome = await registry.resolve(
        request.address,
        provider=request.provider,
        options=request.to_options(),
    )

    if request.provider and outcome.error is not None:
        mapped = EXPLICIT_PROVIDER_STATUS.get(outcome.error.code)
        if mapped is not None:
            status_code, detail = mapped
            logger.warning(f"[{request_id}] {detail}: {request.provider}")
            raise HTTPException(status_code=status_code, detail=detail)

    logger.info(
        f"[{request_id}] Geocode finished: provider={outcome.provider} "
        f"success={outcome.success} results={len(outcome.results)}"
    )
    return outcome.as_dict()
