"""
Place reviews merged across upstream sort orders and paginated.

Usage:
    from geo_gateway.reviews import GoogleReviewsProvider, ReviewAggregator, ReviewOptions

    aggregator = ReviewAggregator(GoogleReviewsProvider())

    # Standard mode: exact counts, offset cursor
    page = await aggregator.get_reviews("ChIJ...", ReviewOptions(page_size=6))

    # Chunked mode: one upstream call per page, estimated total
    page = await aggregator.get_reviews_chunked("ChIJ...", ReviewOptions(minimum_rating=4))
"""

from geo_gateway.reviews.base import (
    IdentityKey,
    Pagination,
    PlaceDetails,
    PlaceSummary,
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
    decode,
    decode_chunk,
    decode_offset,
    encode,
)
from geo_gateway.reviews.google import GoogleReviewsProvider
from geo_gateway.reviews.aggregator import ReviewAggregator

__all__ = [
    # Types
    "IdentityKey",
    "Pagination",
    "PlaceDetails",
    "PlaceSummary",
    "Review",
    "ReviewFetch",
    "ReviewOptions",
    "ReviewPage",
    "ReviewsProvider",
    "SortOrder",
    "dedupe_reviews",
    "filter_by_rating",
    # Cursors
    "ChunkCursor",
    "OffsetCursor",
    "decode",
    "decode_chunk",
    "decode_offset",
    "encode",
    # Providers
    "GoogleReviewsProvider",
    "ReviewAggregator",
]
