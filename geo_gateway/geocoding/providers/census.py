"""
US Census Bureau Geocoder provider.

Free, unlimited geocoding service optimized for US addresses.
https://geocoding.geo.census.gov/geocoder/
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from geo_gateway.core import settings
from geo_gateway.core.utils.address import looks_like_us_address
from geo_gateway.geocoding.base import (
    AddressComponents,
    GeocodeOptions,
    GeocodeOutcome,
    GeocodeResult,
    GeocodingError,
    RateLimit,
)

logger = logging.getLogger(__name__)

US_COUNTRY_CODES = {"US", "USA", "UNITED STATES"}


def calculate_confidence(match: dict) -> float:
    """
    Heuristic match score: the average of a matched-address indicator
    (1 or 0.5) and a coordinates indicator (1 or 0), capped at 1.0.
    """
    match_type = 1.0 if match.get("matchedAddress") else 0.5
    has_coordinates = 1.0 if match.get("coordinates") else 0.0
    return min(1.0, (match_type + has_coordinates) / 2)


def extract_components(match: dict) -> AddressComponents:
    parts = match.get("addressComponents") or {}

    street = None
    if parts.get("streetName"):
        street = " ".join(
            p for p in (
                parts.get("preDirectional"),
                parts.get("streetName"),
                parts.get("streetNamePostType"),
            ) if p
        )

    return AddressComponents(
        street=street,
        city=parts.get("city") or None,
        state=parts.get("state") or None,
        country="United States",
        postal_code=parts.get("zip") or None,
    )


class CensusGeocoder:
    """
    US Census Bureau Geocoder.

    Pros:
    - Free and unlimited
    - Good accuracy for US addresses
    - No API key required

    Cons:
    - US only (clearly foreign input is rejected before any network call)
    - Can be slow during peak hours

    Usage:
        geocoder = CensusGeocoder()
        outcome = await geocoder.geocode("1600 Pennsylvania Avenue NW, Washington, DC 20500")
    """

    name = "census"

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        probe_address: Optional[str] = None,
    ):
        self.url = url or settings.CENSUS_GEOCODER_URL
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self.probe_address = probe_address or settings.CENSUS_PROBE_ADDRESS

    def rate_limit(self) -> RateLimit:
        return RateLimit(
            requests=settings.CENSUS_RATE_LIMIT,
            period_ms=settings.RATE_LIMIT_PERIOD_MS,
        )

    async def geocode(
        self,
        address: str,
        options: Optional[GeocodeOptions] = None,
    ) -> GeocodeOutcome:
        """
        Geocode a one-line address using the US Census Geocoder.

        Args:
            address: Full one-line address
            options: Optional hints; a non-US country is rejected, bounds
                     drop matches outside the box

        Returns:
            GeocodeOutcome; success with no results when nothing matched
        """
        options = options or GeocodeOptions()

        if options.country and options.country.strip().upper() not in US_COUNTRY_CODES:
            return GeocodeOutcome.failure(
                self.name,
                "NON_US_ADDRESS",
                f"Census geocoder only supports US addresses (country={options.country})",
            )

        if not looks_like_us_address(address):
            logger.debug(f"Census: Skipping non-US address {address}")
            return GeocodeOutcome.failure(
                self.name,
                "NON_US_ADDRESS",
                "Census geocoder only supports US addresses",
            )

        params = {
            "address": address,
            "benchmark": "Public_AR_Current",
            "format": "json",
        }

        try:
            data = await self._request_json(params)
        except asyncio.TimeoutError:
            logger.warning(f"Census: Timeout for {address}")
            return GeocodeOutcome.failure(self.name, "CENSUS_ERROR", "Census API request timed out")
        except (aiohttp.ClientError, GeocodingError, ValueError) as e:
            logger.warning(f"Census: Error geocoding {address}: {e}")
            return GeocodeOutcome.failure(self.name, "CENSUS_ERROR", str(e) or "Unknown error occurred")

        matches = ((data or {}).get("result") or {}).get("addressMatches") or []
        if not matches:
            logger.debug(f"Census: No match for {address}")
            return GeocodeOutcome.ok(self.name)

        results = []
        for match in matches:
            result = self._transform_match(match)
            if result is None:
                continue
            if options.bounds and not options.bounds.contains(result.latitude, result.longitude):
                logger.debug(
                    f"Census: Match outside requested bounds for {address}: "
                    f"{result.latitude}, {result.longitude}"
                )
                continue
            results.append(result)

        return GeocodeOutcome.ok(self.name, results)

    async def is_available(self) -> bool:
        """Probe with a known address; True only if it returns a match."""
        try:
            outcome = await self.geocode(self.probe_address)
        except Exception as e:
            logger.error(f"Census: Availability probe failed: {e}")
            return False
        return outcome.has_results

    async def _request_json(self, params: dict) -> dict:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self.url, params=params) as response:
                if response.status != 200:
                    raise GeocodingError(
                        f"Census API error: {response.status} {response.reason}",
                        provider=self.name,
                        code="CENSUS_ERROR",
                    )
                return await response.json(content_type=None)

    def _transform_match(self, match: dict) -> Optional[GeocodeResult]:
        coords = match.get("coordinates") or {}
        try:
            lat = float(coords["y"])
            lng = float(coords["x"])
        except (KeyError, TypeError, ValueError):
            logger.debug(f"Census: Match without usable coordinates: {match.get('matchedAddress')}")
            return None

        return GeocodeResult(
            latitude=lat,
            longitude=lng,
            formatted_address=match.get("matchedAddress", ""),
            confidence=calculate_confidence(match),
            components=extract_components(match),
            raw=match,
        )
