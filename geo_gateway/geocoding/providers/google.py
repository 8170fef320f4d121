"""
Google Geocoding API provider.

Paid, accurate geocoding service with global coverage.
https://developers.google.com/maps/documentation/geocoding
"""

import logging
from typing import List, Optional

import httpx

from geo_gateway.core import settings
from geo_gateway.geocoding.base import (
    AddressComponents,
    GeocodeOptions,
    GeocodeOutcome,
    GeocodeResult,
    RateLimit,
)

logger = logging.getLogger(__name__)

# Canonical component -> Google address_components type
COMPONENT_TYPES = {
    "street": "route",
    "city": "locality",
    "state": "administrative_area_level_1",
    "country": "country",
    "postal_code": "postal_code",
}


def find_component(address_components: List[dict], component_type: str) -> Optional[str]:
    for component in address_components or []:
        if component_type in component.get("types", []):
            return component.get("long_name") or None
    return None


class GoogleGeocoder:
    """
    Google Geocoding API provider.

    Pros:
    - Very accurate
    - Global coverage
    - Good address normalization

    Cons:
    - Requires API key
    - Paid service (~$5 per 1000 requests)

    Google ranks candidates itself, so every accepted match is reported with
    full confidence.

    Usage:
        geocoder = GoogleGeocoder()  # Uses GOOGLE_MAPS_API_KEY from env
        outcome = await geocoder.geocode("10 Downing Street, London, UK")
    """

    name = "google"

    def __init__(
        self,
        api_key: Optional[str] = None,
        referer: Optional[str] = None,
        timeout: Optional[float] = None,
        probe_address: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.referer = referer or settings.GOOGLE_API_REFERER
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self.url = settings.GOOGLE_GEOCODING_URL
        self.probe_address = probe_address or settings.GOOGLE_PROBE_ADDRESS

    def rate_limit(self) -> RateLimit:
        return RateLimit(
            requests=settings.GOOGLE_GEOCODING_RATE_LIMIT,
            period_ms=settings.RATE_LIMIT_PERIOD_MS,
        )

    async def geocode(
        self,
        address: str,
        options: Optional[GeocodeOptions] = None,
    ) -> GeocodeOutcome:
        """
        Geocode an address using Google Geocoding API.

        Args:
            address: Free-form address
            options: language, bounds bias and country restriction

        Returns:
            GeocodeOutcome; ZERO_RESULTS maps to success with no results,
            any other non-OK status to a failure carrying that status
        """
        if not self.api_key:
            return GeocodeOutcome.failure(
                self.name,
                "API_KEY_MISSING",
                "GOOGLE_MAPS_API_KEY not configured",
            )

        options = options or GeocodeOptions()
        params = {
            "address": address,
            "key": self.api_key,
        }
        if options.language:
            params["language"] = options.language
        if options.bounds:
            params["bounds"] = options.bounds.as_param
        if options.country:
            params["components"] = f"country:{options.country}"

        try:
            data = await self._request_json(params)
        except httpx.HTTPStatusError as e:
            logger.warning(f"Google: HTTP {e.response.status_code} for {address}")
            return GeocodeOutcome.failure(self.name, str(e.response.status_code), str(e))
        except httpx.HTTPError as e:
            logger.warning(f"Google: Request error for {address}: {e}")
            return GeocodeOutcome.failure(self.name, "UNKNOWN", str(e) or "Unknown error occurred")
        except ValueError as e:
            logger.error(f"Google: Invalid response for {address}: {e}")
            return GeocodeOutcome.failure(self.name, "UNKNOWN", "Invalid response from Google")

        status = data.get("status")
        if status == "ZERO_RESULTS":
            logger.debug(f"Google: No results for {address}")
            return GeocodeOutcome.ok(self.name)

        if status != "OK":
            message = f"Geocoding failed: {status}"
            if data.get("error_message"):
                message += f" - {data['error_message']}"
            logger.warning(f"Google API error for {address}: {message}")
            return GeocodeOutcome.failure(self.name, status or "UNKNOWN", message)

        try:
            results = [self._transform_result(r) for r in data.get("results", [])]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Google: Malformed result for {address}: {e}")
            return GeocodeOutcome.failure(self.name, "UNKNOWN", f"Malformed geocoding result: {e}")

        return GeocodeOutcome.ok(self.name, results)

    async def is_available(self) -> bool:
        """Probe with a known address. Always False without an API key."""
        if not self.api_key:
            return False
        try:
            outcome = await self.geocode(self.probe_address)
        except Exception as e:
            logger.error(f"Google: Availability probe failed: {e}")
            return False
        return outcome.success

    async def _request_json(self, params: dict) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                self.url,
                params=params,
                headers={"Referer": self.referer},
            )
            response.raise_for_status()
            return response.json()

    def _transform_result(self, result: dict) -> GeocodeResult:
        location = result["geometry"]["location"]
        address_components = result.get("address_components", [])

        return GeocodeResult(
            latitude=float(location["lat"]),
            longitude=float(location["lng"]),
            formatted_address=result.get("formatted_address", ""),
            confidence=1.0,
            components=AddressComponents(**{
                field_name: find_component(address_components, component_type)
                for field_name, component_type in COMPONENT_TYPES.items()
            }),
            raw=result,
        )
