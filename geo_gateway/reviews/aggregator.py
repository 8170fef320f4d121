"""
Review aggregation and pagination.

The upstream returns about five reviews per call, differs by sort order, and
offers no pagination. Two strategies turn that into a paginated stream:

- Standard mode (`get_reviews`): fetch every sort order concurrently, merge,
  deduplicate by (author, time), cache for an hour, then page with offset
  cursors. Counts are exact over the merged set.
- Chunked mode (`get_reviews_chunked`): fetch one sort order per call and
  carry the emitted identity keys in the cursor so later pages never repeat
  a review. Only the upstream's estimated total is known.

Usage:
    aggregator = ReviewAggregator(GoogleReviewsProvider())
    page = await aggregator.get_reviews("ChIJ...", ReviewOptions(page_size=6))
    more = await aggregator.get_reviews("ChIJ...", ReviewOptions(
        page_size=6, cursor=page.pagination.next_page_token,
    ))
"""

import asyncio
import logging
import math
import time
from typing import Callable, List, Optional, Tuple

from geo_gateway.core import settings, TTLCache
from geo_gateway.geocoding.base import ProviderError
from geo_gateway.reviews.base import (
    Pagination,
    PlaceDetails,
    Review,
    ReviewFetch,
    ReviewOptions,
    ReviewPage,
    ReviewsProvider,
    SortOrder,
    dedupe_reviews,
    filter_by_rating,
)
from geo_gateway.reviews.cursor import (
    ChunkCursor,
    OffsetCursor,
    decode_chunk,
    decode_offset,
    encode,
)

logger = logging.getLogger(__name__)


class ReviewAggregator:
    """
    Merges and paginates reviews from a single review provider.

    Owns two in-memory caches keyed by (place_id, language): the merged
    review list and the place summary. Both expire `ttl` seconds after
    insertion.
    """

    def __init__(
        self,
        provider: ReviewsProvider,
        ttl: Optional[float] = None,
        default_page_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
        default_language: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.provider = provider
        ttl = ttl if ttl is not None else settings.REVIEWS_CACHE_TTL
        self.default_page_size = default_page_size or settings.DEFAULT_REVIEW_PAGE_SIZE
        self.max_page_size = max_page_size or settings.MAX_REVIEW_PAGE_SIZE
        self.default_language = default_language or settings.DEFAULT_LANGUAGE
        self.reviews_cache = TTLCache(ttl, clock=clock)
        self.details_cache = TTLCache(ttl, clock=clock)

    @property
    def name(self) -> str:
        return self.provider.name

    async def is_available(self) -> bool:
        try:
            return bool(await self.provider.is_available())
        except Exception as e:
            logger.error(f"Error checking provider availability: {e}")
            return False

    async def get_reviews(
        self,
        place_id: str,
        options: Optional[ReviewOptions] = None,
    ) -> ReviewPage:
        """Standard pre-fetch pagination. Never raises."""
        options = options or ReviewOptions()
        try:
            return await self._get_reviews(place_id, options)
        except Exception as e:
            logger.error(f"Error in get_reviews for {place_id}: {e}")
            return ReviewPage.failure(self.name, "UNKNOWN", str(e) or "Unknown error occurred")

    async def get_reviews_chunked(
        self,
        place_id: str,
        options: Optional[ReviewOptions] = None,
    ) -> ReviewPage:
        """On-demand pagination, one upstream sort order per call. Never raises."""
        options = options or ReviewOptions()
        try:
            return await self._get_reviews_chunked(place_id, options)
        except Exception as e:
            logger.error(f"Error in get_reviews_chunked for {place_id}: {e}")
            return ReviewPage.failure(self.name, "UNKNOWN", str(e) or "Unknown error occurred")

    async def _get_reviews(self, place_id: str, options: ReviewOptions) -> ReviewPage:
        page_size = self._page_size(options.page_size)
        language = options.language or self.default_language

        details = await self._place_details(place_id, language)
        if not details.success:
            logger.error(f"Failed to get place details for {place_id}: {details.error}")
            return ReviewPage(success=False, provider=self.name, error=details.error)

        merged, error = await self._merged_reviews(place_id, language)
        if merged is None:
            return ReviewPage(success=False, provider=self.name, summary=details.summary, error=error)

        start_index = 0
        minimum_rating = options.minimum_rating
        cursor = decode_offset(options.cursor)
        if cursor is not None:
            if cursor.place_id and cursor.place_id != place_id:
                logger.warning(
                    f"Page token for {cursor.place_id} supplied for {place_id}, "
                    f"starting from the first page"
                )
            else:
                # Offsets index the list filtered by the token's rating
                start_index = cursor.start_index
                minimum_rating = cursor.minimum_rating

        reviews = filter_by_rating(merged, minimum_rating)
        if minimum_rating is not None:
            logger.debug(
                f"After rating filter (min: {minimum_rating}), "
                f"have {len(reviews)} reviews for {place_id}"
            )

        total = len(reviews)
        end_index = start_index + page_size
        page = reviews[start_index:end_index]
        has_more = end_index < total

        next_token = None
        if has_more:
            next_token = encode(OffsetCursor(
                start_index=end_index,
                place_id=place_id,
                total_reviews=total,
                minimum_rating=minimum_rating,
            ))

        logger.info(
            f"Returning {len(page)} reviews for {place_id}, "
            f"range {start_index}-{end_index} of {total}, has_more: {has_more}"
        )

        return ReviewPage(
            success=True,
            provider=self.name,
            results=tuple(page),
            summary=details.summary,
            pagination=Pagination(
                has_more_reviews=has_more,
                next_page_token=next_token,
                current_page=start_index // page_size + 1,
                total_pages=math.ceil(total / page_size),
                page_size=page_size,
                total_reviews=total,
            ),
        )

    async def _get_reviews_chunked(self, place_id: str, options: ReviewOptions) -> ReviewPage:
        page_size = self._page_size(options.page_size)
        language = options.language or self.default_language

        details = await self._place_details(place_id, language)
        if not details.success:
            logger.error(f"Failed to get place details for {place_id}: {details.error}")
            return ReviewPage(success=False, provider=self.name, error=details.error)

        cursor = decode_chunk(options.cursor)
        if cursor is None:
            fetched_methods: Tuple[SortOrder, ...] = ()
            seen_keys = []
            minimum_rating = options.minimum_rating
        else:
            fetched_methods = cursor.fetched_methods
            seen_keys = list(cursor.seen_keys)
            minimum_rating = cursor.minimum_rating

        rotation = SortOrder.rotation()
        untried = [m for m in rotation if m not in fetched_methods]
        # Repeating a sort order can still surface unseen reviews later on
        current = untried[0] if untried else rotation[0]
        logger.info(f"Using sort method: {current.value} for next page of reviews")

        fetch = await self.provider.fetch_reviews(place_id, language, current)
        if not fetch.success:
            return ReviewPage(success=False, provider=self.name, summary=details.summary, error=fetch.error)

        seen = set(seen_keys)
        page: List[Review] = []
        overflow = False
        for review in fetch.reviews:
            key = review.identity_key
            if key in seen:
                continue
            if minimum_rating is not None and review.rating < minimum_rating:
                continue
            if len(page) >= page_size:
                overflow = True
                break
            page.append(review)
            seen.add(key)
            seen_keys.append(key)

        if current not in fetched_methods:
            fetched_methods = fetched_methods + (current,)
        has_more = any(m not in fetched_methods for m in rotation) or overflow

        next_token = None
        if has_more:
            next_token = encode(ChunkCursor(
                sort_method=current,
                fetched_methods=fetched_methods,
                seen_keys=tuple(seen_keys),
                minimum_rating=minimum_rating,
            ))

        logger.info(f"Returning {len(page)} chunked reviews for {place_id}, has_more: {has_more}")

        return ReviewPage(
            success=True,
            provider=self.name,
            results=tuple(page),
            summary=details.summary,
            pagination=Pagination(
                has_more_reviews=has_more,
                next_page_token=next_token,
                page_size=page_size,
                total_reviews=details.summary.total_reviews if details.summary else 0,
                total_is_estimate=True,
            ),
        )

    async def _place_details(self, place_id: str, language: str) -> PlaceDetails:
        key = (place_id, language)
        cached = self.details_cache.get(key)
        if cached is not None:
            logger.debug(f"Using cached details for {place_id}")
            return cached

        details = await self.provider.get_place_details(place_id, language)
        if details.success:
            self.details_cache.set(key, details)
        return details

    async def _merged_reviews(
        self,
        place_id: str,
        language: str,
    ) -> Tuple[Optional[Tuple[Review, ...]], Optional[ProviderError]]:
        """
        Deduplicated reviews across every sort order, from cache when fresh.

        Returns (reviews, None), or (None, error) when every fetch failed.
        Partial results are returned but not cached.
        """
        key = (place_id, language)
        cached = self.reviews_cache.get(key)
        if cached is not None:
            logger.debug(f"Using cached reviews for {place_id}, found {len(cached)} reviews")
            return cached, None

        logger.info(f"Fetching fresh reviews for {place_id} using multiple sort orders")
        sorts = SortOrder.rotation()
        fetches = await asyncio.gather(
            *(self.provider.fetch_reviews(place_id, language, sort) for sort in sorts),
            return_exceptions=True,
        )

        combined: List[Review] = []
        last_error: Optional[ProviderError] = None
        failures = 0
        for sort, fetch in zip(sorts, fetches):
            if isinstance(fetch, Exception):
                fetch = ReviewFetch(success=False, error=ProviderError("UNKNOWN", str(fetch)))
            if not fetch.success:
                failures += 1
                last_error = fetch.error
                logger.warning(f"Fetching reviews with sort={sort.value} failed: {fetch.error}")
                continue
            logger.info(f"Got {len(fetch.reviews)} reviews from {sort.value} sort for {place_id}")
            combined.extend(fetch.reviews)

        if failures == len(sorts):
            return None, last_error

        merged = tuple(dedupe_reviews(combined))
        logger.info(f"After deduplication, have {len(merged)} unique reviews for {place_id}")

        if failures == 0:
            self.reviews_cache.set(key, merged)
        return merged, None

    def _page_size(self, requested: Optional[int]) -> int:
        if not requested or requested <= 0:
            return self.default_page_size
        return min(int(requested), self.max_page_size)
