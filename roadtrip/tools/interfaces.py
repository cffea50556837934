"""Collaborator protocols and I/O schemas.

External payloads are decoded into these models at the adapter boundary;
absent fields become explicit ``None`` instead of leaking raw dicts inward.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from roadtrip.domain.models import GeoPoint, RouteEndpoint


class NearbySearchInput(BaseModel):
    lat: float
    lng: float
    radius_m: int = Field(gt=0)
    place_type: Optional[str] = None
    keyword: Optional[str] = None


class NearbyPlace(BaseModel):
    place_id: Optional[str] = None
    name: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    vicinity: Optional[str] = None
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None

    @property
    def has_location(self) -> bool:
        return self.lat is not None and self.lng is not None


class DirectionsResult(BaseModel):
    path: list[GeoPoint] = Field(default_factory=list)
    start: RouteEndpoint
    end: RouteEndpoint
    distance_text: str = ""
    duration_text: str = ""


class AddressComponent(BaseModel):
    long_name: str = ""
    short_name: str = ""
    types: list[str] = Field(default_factory=list)


class GeocodeResult(BaseModel):
    lat: float
    lng: float
    formatted_address: str = ""
    components: list[AddressComponent] = Field(default_factory=list)


class ReverseGeocodeResult(BaseModel):
    formatted_address: str = ""
    components: list[AddressComponent] = Field(default_factory=list)


class PlaceDetails(BaseModel):
    name: Optional[str] = None
    website: Optional[str] = None
    formatted_phone_number: Optional[str] = None
    formatted_address: Optional[str] = None
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None
    opening_hours: Optional[dict[str, Any]] = None
    geometry: Optional[dict[str, Any]] = None
    url: Optional[str] = None


class WeatherQuery(BaseModel):
    q: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    units: str = "metric"
    lang: str = "zh_tw"


@runtime_checkable
class DirectionsTool(Protocol):
    def get_directions(self, origin: str, destination: str) -> DirectionsResult: ...


@runtime_checkable
class NearbySearchTool(Protocol):
    def search_nearby(self, params: NearbySearchInput) -> list[NearbyPlace]: ...


@runtime_checkable
class PlaceDetailsTool(Protocol):
    def get_place_details(self, place_id: str) -> PlaceDetails: ...


@runtime_checkable
class GeocodeTool(Protocol):
    def geocode(self, query: str) -> GeocodeResult: ...

    def reverse_geocode(self, lat: float, lng: float) -> ReverseGeocodeResult: ...


@runtime_checkable
class FallbackRouteTool(Protocol):
    def geocode(self, query: str) -> GeocodeResult: ...

    def route(self, origin: GeoPoint, destination: GeoPoint) -> DirectionsResult: ...


@runtime_checkable
class WeatherTool(Protocol):
    def current(self, query: WeatherQuery) -> dict[str, Any]: ...

    def forecast(self, query: WeatherQuery) -> dict[str, Any]: ...


__all__ = [
    "AddressComponent",
    "DirectionsResult",
    "DirectionsTool",
    "FallbackRouteTool",
    "GeocodeResult",
    "GeocodeTool",
    "NearbyPlace",
    "NearbySearchInput",
    "NearbySearchTool",
    "PlaceDetails",
    "PlaceDetailsTool",
    "ReverseGeocodeResult",
    "WeatherQuery",
    "WeatherTool",
]
