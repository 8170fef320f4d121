"""
Canonical types and the provider contract for geocoding.

Every provider translates its upstream payload into these types so callers
can treat all providers identically. Failures are returned as data on the
outcome (`GeocodeOutcome.error`), never raised across the provider boundary.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence, Tuple, runtime_checkable

from geo_gateway.core.utils.geo import is_within_bounds


@dataclass(frozen=True)
class AddressComponents:
    """Structured address parts. Absent parts are None and omitted from output."""

    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None

    @property
    def as_dict(self) -> dict:
        data = {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "postalCode": self.postal_code,
        }
        return {k: v for k, v in data.items() if v}


@dataclass(frozen=True)
class GeocodeResult:
    """One matched location (WGS84 decimal degrees)."""

    latitude: float
    longitude: float
    formatted_address: str = ""
    confidence: float = 1.0  # 0.0 to 1.0
    components: AddressComponents = field(default_factory=AddressComponents)
    raw: Optional[Any] = field(default=None, compare=False, repr=False)

    def as_dict(self, include_raw: bool = True) -> dict:
        data = {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "formattedAddress": self.formatted_address,
            "confidence": self.confidence,
            "components": self.components.as_dict,
        }
        if include_raw:
            data["raw"] = self.raw
        return data


@dataclass(frozen=True)
class ProviderError:
    """Provider-specific error code plus a human-readable message."""

    code: str
    message: str

    @property
    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class GeocodeOutcome:
    """
    Result envelope returned by every geocoding provider.

    success=True with no results means the provider understood the request
    but found nothing; that is distinct from a failure.
    """

    success: bool
    provider: str
    results: Tuple[GeocodeResult, ...] = ()
    error: Optional[ProviderError] = None

    @classmethod
    def ok(cls, provider: str, results: Sequence[GeocodeResult] = ()) -> "GeocodeOutcome":
        return cls(success=True, provider=provider, results=tuple(results))

    @classmethod
    def failure(cls, provider: str, code: str, message: str) -> "GeocodeOutcome":
        return cls(
            success=False,
            provider=provider,
            error=ProviderError(code=code, message=message),
        )

    @property
    def has_results(self) -> bool:
        return self.success and len(self.results) > 0

    def as_dict(self, include_raw: bool = True) -> dict:
        """Serialize with the same field set regardless of provider."""
        data = {
            "success": self.success,
            "provider": self.provider,
            "results": [r.as_dict(include_raw=include_raw) for r in self.results],
        }
        if self.error is not None:
            data["error"] = self.error.as_dict
        return data


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float


@dataclass(frozen=True)
class Bounds:
    """Bounding box given by its northeast and southwest corners."""

    northeast: LatLng
    southwest: LatLng

    def contains(self, lat: float, lng: float) -> bool:
        return is_within_bounds(
            lat, lng,
            south=self.southwest.lat,
            west=self.southwest.lng,
            north=self.northeast.lat,
            east=self.northeast.lng,
        )

    @property
    def as_param(self) -> str:
        """Google `bounds` parameter format: sw_lat,sw_lng|ne_lat,ne_lng"""
        return (
            f"{self.southwest.lat},{self.southwest.lng}|"
            f"{self.northeast.lat},{self.northeast.lng}"
        )


@dataclass(frozen=True)
class GeocodeOptions:
    """Optional request hints passed through to providers."""

    country: Optional[str] = None
    language: Optional[str] = None
    bounds: Optional[Bounds] = None


@dataclass(frozen=True)
class RateLimit:
    """Advisory request budget; not enforced."""

    requests: int
    period_ms: int

    @property
    def as_dict(self) -> dict:
        return {"requests": self.requests, "period": self.period_ms}


class GeocodingError(Exception):
    """Raised inside an adapter; converted to a failed outcome before returning."""

    def __init__(self, message: str, provider: str = "", code: str = ""):
        self.message = message
        self.provider = provider
        self.code = code
        super().__init__(f"[{provider}] {message}" if provider else message)


@runtime_checkable
class GeocodingProvider(Protocol):
    """
    Contract every geocoding adapter implements.

    - geocode(): never raises; upstream success/empty/error signals map onto
      GeocodeOutcome
    - is_available(): live probe with a known-good input; never raises
    - rate_limit(): advisory budget
    """

    name: str

    async def geocode(
        self,
        address: str,
        options: Optional[GeocodeOptions] = None,
    ) -> GeocodeOutcome:
        ...

    async def is_available(self) -> bool:
        ...

    def rate_limit(self) -> RateLimit:
        ...
