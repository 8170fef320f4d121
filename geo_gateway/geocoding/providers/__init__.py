"""
Geocoding provider implementations.
"""

from geo_gateway.geocoding.providers.census import CensusGeocoder
from geo_gateway.geocoding.providers.google import GoogleGeocoder

__all__ = ["CensusGeocoder", "GoogleGeocoder"]
