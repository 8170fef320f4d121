"""
Shared utility functions.

Modules:
- geo: Geographic calculations (haversine, bounds checking)
- address: US address heuristic, normalization, key masking
"""

from geo_gateway.core.utils.geo import (
    haversine_distance,
    is_within_bounds,
)
from geo_gateway.core.utils.address import (
    looks_like_us_address,
    normalize_address,
    mask_secret,
)

__all__ = [
    # Geo utilities
    "haversine_distance",
    "is_within_bounds",
    # Address utilities
    "looks_like_us_address",
    "normalize_address",
    "mask_secret",
]
