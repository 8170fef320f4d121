"""
Geocoding with cheapest-first provider fallback.

Provides a unified interface over:
- Census: US Census Bureau Geocoder (free, US only)
- Google: Google Geocoding API (paid, global)

Usage:
    from geo_gateway.geocoding import default_registry, geocode_address

    # Census first, Google as fallback
    outcome = await geocode_address("1600 Pennsylvania Avenue NW, Washington, DC 20500")

    # Pin a provider (no fallback)
    outcome = await geocode_address("10 Downing Street, London, UK", provider="google")
"""

from geo_gateway.geocoding.base import (
    AddressComponents,
    Bounds,
    GeocodeOptions,
    GeocodeOutcome,
    GeocodeResult,
    GeocodingError,
    GeocodingProvider,
    LatLng,
    ProviderError,
    RateLimit,
)
from geo_gateway.geocoding.providers.census import CensusGeocoder
from geo_gateway.geocoding.providers.google import GoogleGeocoder
from geo_gateway.geocoding.facade import (
    ProviderRegistry,
    compare_providers,
    default_registry,
    geocode_address,
)

__all__ = [
    # Types
    "AddressComponents",
    "Bounds",
    "GeocodeOptions",
    "GeocodeOutcome",
    "GeocodeResult",
    "GeocodingError",
    "GeocodingProvider",
    "LatLng",
    "ProviderError",
    "RateLimit",
    # Providers
    "CensusGeocoder",
    "GoogleGeocoder",
    # Selection
    "ProviderRegistry",
    "compare_providers",
    "default_registry",
    "geocode_address",
]
