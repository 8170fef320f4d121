"""
Place lookup by name, phone, CID or coordinates.

Usage:
    from geo_gateway.places import PlaceSearchParams, search_for_place

    result = await search_for_place(PlaceSearchParams(name="Blue Bottle", city="Oakland"))
"""

from geo_gateway.places.search import (
    PlaceSearchClient,
    PlaceSearchError,
    PlaceSearchParams,
    PlaceSearchResult,
    extract_cid_from_url,
    search_for_place,
)

__all__ = [
    "PlaceSearchClient",
    "PlaceSearchError",
    "PlaceSearchParams",
    "PlaceSearchResult",
    "extract_cid_from_url",
    "search_for_place",
]
