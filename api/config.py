"""
API configuration module.

Centralizes all configuration for the geo-gateway HTTP API.
"""

import os

from geo_gateway import __version__
from geo_gateway.core import settings as core_settings


class APISettings:
    """API-specific settings extending core settings."""

    # API-specific settings
    API_TITLE = "Geo Gateway API"
    API_DESCRIPTION = "Cheapest-first geocoding and paginated place reviews"
    API_VERSION = __version__
    API_PREFIX = "/api/v1"

    # CORS settings
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
    CORS_ALLOW_CREDENTIALS = True
    CORS_ALLOW_METHODS = ["*"]
    CORS_ALLOW_HEADERS = ["*"]

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def allowed_api_keys(cls) -> list:
        return core_settings.allowed_api_keys()

    @classmethod
    def default_api_key(cls) -> str:
        return core_settings.DEFAULT_API_KEY

    @classmethod
    def validate_google(cls) -> bool:
        """Check if the Google Maps API key is configured."""
        return core_settings.validate_google()


settings = APISettings()
