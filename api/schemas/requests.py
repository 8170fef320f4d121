"""
Request schemas for the geo-gateway API.

Bodies use camelCase keys on the wire; snake_case names are accepted too.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from geo_gateway.geocoding import Bounds, GeocodeOptions, LatLng
from geo_gateway.places import PlaceSearchParams
from geo_gateway.reviews import ReviewOptions


class LatLngModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class BoundsModel(BaseModel):
    northeast: LatLngModel
    southwest: LatLngModel


class GeocodeOptionsModel(BaseModel):
    country: Optional[str] = Field(None, description="ISO 3166-1 alpha-2 country hint")
    language: Optional[str] = Field(None, description="Result language, e.g. 'en'")
    bounds: Optional[BoundsModel] = Field(None, description="Viewport to bias results to")


class GeocodeRequest(BaseModel):
    """Request body for address geocoding."""

    address: str = Field(..., min_length=1, description="Free-text address")
    provider: Optional[str] = Field(
        None,
        description="Pin a provider ('census' or 'google'); disables fallback",
    )
    options: Optional[GeocodeOptionsModel] = None

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "address": "1600 Pennsylvania Avenue NW, Washington, DC 20500",
            }
        },
    )

    def to_options(self) -> Optional[GeocodeOptions]:
        if self.options is None:
            return None
        bounds = None
        if self.options.bounds is not None:
            bounds = Bounds(
                northeast=LatLng(self.options.bounds.northeast.lat, self.options.bounds.northeast.lng),
                southwest=LatLng(self.options.bounds.southwest.lat, self.options.bounds.southwest.lng),
            )
        return GeocodeOptions(
            country=self.options.country,
            language=self.options.language,
            bounds=bounds,
        )


class ReviewsRequest(BaseModel):
    """Request body for place reviews."""

    place_id: str = Field(..., alias="placeId", min_length=1, description="Google place id")
    max_results: Optional[int] = Field(None, alias="maxResults", ge=1, le=100, description="Page size")
    language: Optional[str] = None
    minimum_rating: Optional[float] = Field(None, alias="minimumRating", ge=1, le=5)
    page_token: Optional[str] = Field(None, alias="pageToken", description="Cursor from a previous page")
    chunked: Optional[bool] = Field(None, description="Use on-demand chunked pagination")

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "placeId": "ChIJK7PWTAelK4cRA4mU_lf0uXc",
                "maxResults": 6,
                "minimumRating": 4,
            }
        },
    )

    def to_options(self) -> ReviewOptions:
        return ReviewOptions(
            page_size=self.max_results,
            language=self.language,
            minimum_rating=self.minimum_rating,
            cursor=self.page_token,
        )


class PlaceSearchRequest(BaseModel):
    """Request body for place lookup. At least one search field is required."""

    name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    cid: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    use_autocomplete: Optional[bool] = Field(None, alias="useAutocomplete")

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "name": "Blue Bottle Coffee",
                "city": "Oakland",
            }
        },
    )

    @model_validator(mode="after")
    def check_search_fields(self) -> "PlaceSearchRequest":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Both latitude and longitude must be provided together")
        if not (self.name or self.phone or self.city or self.cid or self.latitude is not None):
            raise ValueError(
                "At least one search parameter (name, phone, city, cid, or coordinates) is required"
            )
        return self

    def to_params(self) -> PlaceSearchParams:
        return PlaceSearchParams(
            name=self.name or None,
            phone=self.phone or None,
            city=self.city or None,
            cid=self.cid or None,
            latitude=self.latitude,
            longitude=self.longitude,
            use_autocomplete=self.use_autocomplete,
        )
