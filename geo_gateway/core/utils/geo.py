"""
Geographic helpers used when comparing providers and filtering matches.

Usage:
    from geo_gateway.core.utils.geo import haversine_distance, is_within_bounds

    # Distance in meters between the White House and the Washington Monument
    distance_m = haversine_distance(38.8977, -77.0365, 38.8895, -77.0353)
"""

import math

EARTH_RADIUS_METERS = 6_371_000


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters between two points given in decimal degrees."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    half_dphi = math.radians(lat2 - lat1) / 2
    half_dlambda = math.radians(lng2 - lng1) / 2

    h = math.sin(half_dphi) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(half_dlambda) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(h)))


def is_within_bounds(
    lat: float,
    lng: float,
    south: float,
    west: float,
    north: float,
    east: float,
) -> bool:
    """
    Check if coordinates fall inside a southwest/northeast bounding box.

    Boxes crossing the antimeridian (west > east) are handled.

    Example:
        >>> is_within_bounds(38.90, -77.04, 38.80, -77.12, 39.00, -76.90)
        True
    """
    if not south <= lat <= north:
        return False
    if west <= east:
        return west <= lng <= east
    return lng >= west or lng <= east
