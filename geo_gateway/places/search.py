"""
Google Places lookup for resolving a business to a place id.

Strategies are tried from most to least specific and the first one that
yields candidates wins:

1. Coordinates (find-place with a 100 m location bias)
2. CID, the numeric id embedded in maps URLs (text search)
3. Autocomplete, when explicitly requested
4. Phone number (text search)
5. Autocomplete as a fallback, unless explicitly disabled
6. Find-place-from-text on "name city"

Usage:
    client = PlaceSearchClient()
    result = await client.search(PlaceSearchParams(name="Blue Bottle", city="Oakland"))
    for candidate in result.candidates:
        print(candidate["place_id"], candidate["name"])
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from geo_gateway.core import settings

logger = logging.getLogger(__name__)

CANDIDATE_FIELDS = "place_id,name,formatted_address,geometry,types"
DETAIL_FIELDS = "name,formatted_address,geometry,formatted_phone_number,website,business_status,types"
MAX_AUTOCOMPLETE_PREDICTIONS = 5
COORDINATE_RADIUS_M = 100
TEXT_BIAS_RADIUS_M = 5000

_CID_PATTERN = re.compile(r"[?&]cid=([0-9]+)")


class PlaceSearchError(Exception):
    """Upstream rejected the final text search."""

    def __init__(self, status: str):
        super().__init__(f"Google Places API error: {status}")
        self.status = status


@dataclass(frozen=True)
class PlaceSearchParams:
    name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    cid: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    use_autocomplete: Optional[bool] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.phone or self.city or self.cid or self.has_coordinates)


@dataclass(frozen=True)
class PlaceSearchResult:
    status: str
    candidates: List[dict] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "PlaceSearchResult":
        return cls(status="ZERO_RESULTS")

    @property
    def found(self) -> bool:
        return self.status == "OK" and bool(self.candidates)

    @property
    def as_dict(self) -> dict:
        return {"status": self.status, "candidates": list(self.candidates)}


def extract_cid_from_url(url: Optional[str]) -> Optional[str]:
    """Pull the numeric cid query parameter out of a Google Maps URL."""
    if not url:
        return None
    match = _CID_PATTERN.search(url)
    return match.group(1) if match else None


def _text_search_candidates(data: dict) -> List[dict]:
    return [
        {
            "place_id": r.get("place_id"),
            "name": r.get("name"),
            "formatted_address": r.get("formatted_address"),
            "geometry": r.get("geometry"),
            "types": r.get("types"),
        }
        for r in data.get("results") or []
    ]


class PlaceSearchClient:
    """Thin async client over the Places find/text-search/autocomplete endpoints."""

    def __init__(self, api_key: Optional[str] = None, timeout: Optional[float] = None):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_PLACES_API_KEY
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self.base_url = f"{settings.GOOGLE_MAPS_BASE_URL}/place"

    async def search(self, params: PlaceSearchParams) -> PlaceSearchResult:
        """
        Run the fallback chain.

        Raises:
            ValueError: No search parameter given
            PlaceSearchError: The final find-place call returned an error status
            httpx.HTTPError: Transport failure on the final find-place call
        """
        if params.is_empty:
            raise ValueError(
                "At least one search parameter (name, phone, city, cid, or coordinates) is required"
            )

        if params.has_coordinates:
            result = await self.search_by_coordinates(params.latitude, params.longitude)
            if result.found:
                return result

        if params.cid:
            result = await self.search_by_cid(params.cid)
            if result.found:
                return result

        if params.name and params.use_autocomplete is True:
            query = f"{params.name} {params.city}" if params.city else params.name
            result = await self.search_with_autocomplete(query)
            if result.found:
                return result

        if params.phone:
            try:
                result = await self.search_by_phone(params.phone, params.city)
                if result.found:
                    return result
            except (PlaceSearchError, httpx.HTTPError, ValueError) as e:
                logger.warning(f"Phone search failed, falling back to text search: {e}")

        query = " ".join(part for part in (params.name, params.city) if part)
        if not query:
            if params.phone:
                query = params.phone
            elif params.cid:
                query = f"cid:{params.cid}"
            elif params.has_coordinates:
                query = f"{params.latitude},{params.longitude}"

        if not query:
            return PlaceSearchResult.empty()

        if params.name and params.use_autocomplete is not False:
            result = await self.search_with_autocomplete(query)
            if result.found:
                return result

        request = {
            "inputtype": "textquery",
            "input": query,
            "fields": CANDIDATE_FIELDS,
        }
        if params.has_coordinates:
            request["locationbias"] = f"circle:{TEXT_BIAS_RADIUS_M}@{params.latitude},{params.longitude}"

        data = await self._get("findplacefromtext", request)
        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            raise PlaceSearchError(status or "UNKNOWN")
        return PlaceSearchResult(status=status, candidates=data.get("candidates") or [])

    async def search_by_coordinates(self, latitude: float, longitude: float) -> PlaceSearchResult:
        try:
            data = await self._get("findplacefromtext", {
                "inputtype": "textquery",
                "input": "place",
                "locationbias": f"circle:{COORDINATE_RADIUS_M}@{latitude},{longitude}",
                "fields": CANDIDATE_FIELDS,
            })
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Error searching by coordinates: {e}")
            return PlaceSearchResult.empty()

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            logger.warning(f"Google Places API error for coordinate search: {status}")
            return PlaceSearchResult.empty()
        return PlaceSearchResult(status=status, candidates=data.get("candidates") or [])

    async def search_by_cid(self, cid: str) -> PlaceSearchResult:
        """Best effort: the API has no CID lookup, so try it as a text query."""
        if not cid or not cid.isdigit():
            return PlaceSearchResult.empty()

        try:
            data = await self._get("textsearch", {"query": f"cid:{cid}"})
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Error searching by CID: {e}")
            return PlaceSearchResult.empty()

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            logger.warning(f"Google Places API error for CID search: {status}")
            return PlaceSearchResult.empty()
        return PlaceSearchResult(status=status, candidates=_text_search_candidates(data))

    async def search_by_phone(self, phone: str, city: Optional[str] = None) -> PlaceSearchResult:
        digits = re.sub(r"\D", "", phone)
        # Ten digits is a US number without its country code
        query = f"+1{digits}" if len(digits) == 10 else digits
        if city:
            query += f" {city}"

        data = await self._get("textsearch", {"query": query})
        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            raise PlaceSearchError(status or "UNKNOWN")
        return PlaceSearchResult(status=status, candidates=_text_search_candidates(data))

    async def search_with_autocomplete(self, query: str, types: str = "establishment") -> PlaceSearchResult:
        """Autocomplete predictions, each expanded with place details (first five)."""
        if not query:
            return PlaceSearchResult.empty()

        try:
            data = await self._get("autocomplete", {"input": query, "types": types})
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Error searching with autocomplete: {e}")
            return PlaceSearchResult.empty()

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            logger.warning(f"Google Places Autocomplete API error: {status}")
            return PlaceSearchResult.empty()

        predictions = (data.get("predictions") or [])[:MAX_AUTOCOMPLETE_PREDICTIONS]
        if not predictions:
            return PlaceSearchResult.empty()

        expanded = await asyncio.gather(*(self._expand_prediction(p) for p in predictions))
        candidates = [c for c in expanded if c is not None]
        return PlaceSearchResult(status="OK" if candidates else "ZERO_RESULTS", candidates=candidates)

    async def get_place_details(self, place_id: str) -> dict:
        """
        Raises:
            PlaceSearchError: Non-OK status
        """
        data = await self._get("details", {"place_id": place_id, "fields": DETAIL_FIELDS})
        status = data.get("status")
        if status != "OK":
            raise PlaceSearchError(status or "UNKNOWN")
        return data.get("result") or {}

    async def _expand_prediction(self, prediction: dict) -> Optional[dict]:
        place_id = prediction.get("place_id")
        try:
            details = await self.get_place_details(place_id)
        except (PlaceSearchError, httpx.HTTPError, ValueError) as e:
            logger.warning(f"Error getting details for place {place_id}: {e}")
            return None

        return {
            "place_id": place_id,
            "name": details.get("name") or prediction.get("description"),
            "formatted_address": details.get("formatted_address") or "",
            "geometry": details.get("geometry"),
            "types": details.get("types"),
        }

    async def _get(self, endpoint: str, params: dict) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                f"{self.base_url}/{endpoint}/json",
                params={**params, "key": self.api_key},
            )
            response.raise_for_status()
            return response.json()


async def search_for_place(
    params: PlaceSearchParams,
    client: Optional[PlaceSearchClient] = None,
) -> PlaceSearchResult:
    """Convenience wrapper around PlaceSearchClient.search."""
    client = client or PlaceSearchClient()
    return await client.search(params)
