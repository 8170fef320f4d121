"""
Core module providing shared configuration, caching, and utilities.

Usage:
    from geo_gateway.core import settings, TTLCache
    from geo_gateway.core.utils import haversine_distance, looks_like_us_address
"""

from geo_gateway.core.config import settings, Settings
from geo_gateway.core.cache import TTLCache

__all__ = [
    "settings",
    "Settings",
    "TTLCache",
]
