"""
Centralized configuration management for the geo-gateway service.

All configuration is loaded from environment variables with sensible defaults.
Use the `settings` singleton for accessing configuration values.

Usage:
    from geo_gateway.core.config import settings

    # Access configuration
    print(settings.GOOGLE_MAPS_API_KEY)
    print(settings.REVIEWS_CACHE_TTL)
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
# Search in common locations
_env_paths = [
    Path(__file__).parent.parent.parent / ".env",  # project root
    Path.cwd() / ".env",  # Current working directory
]

for env_path in _env_paths:
    if env_path.exists():
        load_dotenv(env_path)
        break


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # API Keys
    # ==========================================================================
    GOOGLE_MAPS_API_KEY: str = field(
        default_factory=lambda: os.getenv("GOOGLE_MAPS_API_KEY", "")
    )
    GOOGLE_PLACES_API_KEY: str = field(
        default_factory=lambda: os.getenv(
            "GOOGLE_PLACES_API_KEY", os.getenv("GOOGLE_MAPS_API_KEY", "")
        )
    )
    # Sent as Referer for keys restricted to HTTP referrers
    GOOGLE_API_REFERER: str = field(
        default_factory=lambda: os.getenv(
            "GOOGLE_API_REFERER",
            os.getenv("APP_URL", "https://api.example.com")
        )
    )

    # ==========================================================================
    # Client API keys (x-api-key allow list)
    # ==========================================================================
    ALLOWED_API_KEYS: str = field(
        default_factory=lambda: os.getenv("ALLOWED_API_KEYS", "")
    )
    DEFAULT_API_KEY: str = field(
        default_factory=lambda: os.getenv("DEFAULT_API_KEY", "")
    )

    # ==========================================================================
    # Upstream endpoints
    # ==========================================================================
    CENSUS_BASE_URL: str = "https://geocoding.geo.census.gov/geocoder"
    GOOGLE_MAPS_BASE_URL: str = "https://maps.googleapis.com/maps/api"

    @property
    def CENSUS_GEOCODER_URL(self) -> str:
        return f"{self.CENSUS_BASE_URL}/locations/onelineaddress"

    @property
    def GOOGLE_GEOCODING_URL(self) -> str:
        return f"{self.GOOGLE_MAPS_BASE_URL}/geocode/json"

    @property
    def GOOGLE_PLACE_DETAILS_URL(self) -> str:
        return f"{self.GOOGLE_MAPS_BASE_URL}/place/details/json"

    # ==========================================================================
    # HTTP Settings
    # ==========================================================================
    HTTP_TIMEOUT: float = field(
        default_factory=lambda: float(os.getenv("HTTP_TIMEOUT", "30"))
    )

    # ==========================================================================
    # Reviews
    # ==========================================================================
    REVIEWS_CACHE_TTL: int = field(
        default_factory=lambda: int(os.getenv("REVIEWS_CACHE_TTL", "3600"))
    )
    DEFAULT_REVIEW_PAGE_SIZE: int = field(
        default_factory=lambda: int(os.getenv("DEFAULT_REVIEW_PAGE_SIZE", "6"))
    )
    MAX_REVIEW_PAGE_SIZE: int = field(
        default_factory=lambda: int(os.getenv("MAX_REVIEW_PAGE_SIZE", "100"))
    )
    DEFAULT_LANGUAGE: str = field(
        default_factory=lambda: os.getenv("DEFAULT_LANGUAGE", "en")
    )

    # ==========================================================================
    # Availability probes (known-good inputs)
    # ==========================================================================
    CENSUS_PROBE_ADDRESS: str = "1600 Pennsylvania Avenue NW, Washington, DC 20500"
    GOOGLE_PROBE_ADDRESS: str = "1600 Amphitheatre Parkway, Mountain View, CA"
    REVIEWS_PROBE_PLACE_ID: str = field(
        default_factory=lambda: os.getenv(
            "REVIEWS_PROBE_PLACE_ID", "ChIJK7PWTAelK4cRA4mU_lf0uXc"
        )
    )

    # ==========================================================================
    # Rate Limiting (advisory, requests per period in milliseconds)
    # ==========================================================================
    CENSUS_RATE_LIMIT: int = field(
        default_factory=lambda: int(os.getenv("CENSUS_RATE_LIMIT", "100"))
    )
    GOOGLE_GEOCODING_RATE_LIMIT: int = field(
        default_factory=lambda: int(os.getenv("GOOGLE_GEOCODING_RATE_LIMIT", "50"))
    )
    GOOGLE_PLACES_RATE_LIMIT: int = field(
        default_factory=lambda: int(os.getenv("GOOGLE_PLACES_RATE_LIMIT", "10"))
    )
    RATE_LIMIT_PERIOD_MS: int = 1000

    # ==========================================================================
    # Census batch geocoding
    # ==========================================================================
    CENSUS_BATCH_MAX_ROWS: int = 10_000
    CENSUS_BATCH_DELAY: float = field(
        default_factory=lambda: float(os.getenv("CENSUS_BATCH_DELAY", "1.0"))
    )

    def validate_google(self) -> bool:
        """Check if the Google Maps API key is configured."""
        return bool(self.GOOGLE_MAPS_API_KEY)

    def allowed_api_keys(self) -> List[str]:
        """Client API keys accepted by the HTTP layer."""
        return [k.strip() for k in self.ALLOWED_API_KEYS.split(",") if k.strip()]


# Singleton settings instance
settings = Settings()
