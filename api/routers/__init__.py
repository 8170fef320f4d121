"""
API routers for the geo-gateway API.
"""

from api.routers.health import router as health_router
from api.routers.geocode import router as geocode_router
from api.routers.reviews import router as reviews_router
from api.routers.places import router as places_router

__all__ = ["health_router", "geocode_router", "reviews_router", "places_router"]
