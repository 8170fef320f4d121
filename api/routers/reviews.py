"""
Place reviews endpoint.
"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Query

from api.config import settings
from api.dependencies import get_review_aggregator, new_request_id, require_api_key
from api.schemas.requests import ReviewsRequest
from api.schemas.responses import ReviewsResponse
from geo_gateway.core.utils import mask_secret
from geo_gateway.reviews import ReviewAggregator

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.API_PREFIX, tags=["Reviews"])


@router.post("/reviews", response_model=ReviewsResponse, response_model_exclude_none=True)
async def get_reviews(
    request: ReviewsRequest,
    chunked: bool = Query(False, description="Use on-demand chunked pagination"),
    api_key: str = Depends(require_api_key),
    aggregator: ReviewAggregator = Depends(get_review_aggregator),
):
    """
    One page of reviews for a place.

    Standard mode merges every upstream sort order and reports exact counts.
    Chunked mode (`?chunked=true` or `"chunked": true`) queries one sort
    order per page and reports the upstream's estimated total.
    """
    request_id = new_request_id()
    started = time.perf_counter()
    use_chunked = chunked or request.chunked is True

    logger.info(
        f"[{request_id}] Processing reviews request from {mask_secret(api_key)}: "
        f"place={request.place_id} size={request.max_results} "
        f"min_rating={request.minimum_rating} chunked={use_chunked} "
        f"has_page_token={bool(request.page_token)}"
    )

    if not await aggregator.is_available():
        logger.error(f"[{request_id}] Reviews provider {aggregator.name} unavailable")
        raise HTTPException(status_code=503, detail="Reviews provider is not available")

    options = request.to_options()
    if use_chunked:
        page = await aggregator.get_reviews_chunked(request.place_id, options)
    else:
        page = await aggregator.get_reviews(request.place_id, options)

    elapsed_ms = round((time.perf_counter() - started) * 1000)
    logger.info(
        f"[{request_id}] Reviews request completed: success={page.success} "
        f"count={len(page.results)} "
        f"has_next={bool(page.pagination and page.pagination.next_page_token)} "
        f"duration={elapsed_ms}ms"
    )
    if page.summary is None:
        logger.warning(f"[{request_id}] No summary data in response for {request.place_id}")

    return page.as_dict()
