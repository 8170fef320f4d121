"""
Place search endpoint.
"""

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException

from api.config import settings
from api.dependencies import get_place_search_client, new_request_id, require_api_key
from api.schemas.requests import PlaceSearchRequest
from api.schemas.responses import PlaceSearchResponse
from geo_gateway.core.utils import mask_secret
from geo_gateway.places import PlaceSearchClient, PlaceSearchError

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.API_PREFIX, tags=["Places"])


@router.post("/place-search", response_model=PlaceSearchResponse)
async def place_search(
    request: PlaceSearchRequest,
    api_key: str = Depends(require_api_key),
    client: PlaceSearchClient = Depends(get_place_search_client),
):
    """Find candidate places by coordinates, CID, name, city or phone."""
    request_id = new_request_id()
    logger.info(f"[{request_id}] Place search from {mask_secret(api_key)}")

    try:
        result = await client.search(request.to_params())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (PlaceSearchError, httpx.HTTPError) as e:
        logger.error(f"[{request_id}] Error in place search: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    logger.info(f"[{request_id}] Place search returned {len(result.candidates)} candidates")
    return result.as_dict
