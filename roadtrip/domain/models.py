"""Pydantic domain models."""

from __future__ import annotations

from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from roadtrip.domain.constants import group_of
from roadtrip.domain.enums import Category, CategoryGroup, Provider, TimeSlot


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class RoutePath(BaseModel):
    """Driving route geometry with a cumulative arc-length prefix (km)."""

    model_config = ConfigDict(frozen=True)

    points: tuple[GeoPoint, ...]
    cumulative_km: tuple[float, ...]

    @property
    def total_km(self) -> float:
        return self.cumulative_km[-1] if self.cumulative_km else 0.0

    @property
    def start(self) -> GeoPoint:
        return self.points[0]

    @property
    def end(self) -> GeoPoint:
        return self.points[-1]


class SearchProbe(GeoPoint):
    index: int = 0


class Candidate(BaseModel):
    place_id: Optional[str] = None
    name: str = ""
    lat: float
    lng: float
    category: Category
    address: Optional[str] = None
    rating: float = 0.0
    user_ratings_total: int = 0
    progress: float = 0.0
    city: Optional[str] = None
    district: Optional[str] = None

    @field_validator("rating", mode="before")
    @classmethod
    def _clamp_rating(cls, value: object) -> float:
        if value is None:
            return 0.0
        return min(5.0, max(0.0, float(value)))

    @field_validator("user_ratings_total", mode="before")
    @classmethod
    def _default_count(cls, value: object) -> int:
        if value is None:
            return 0
        return max(0, int(value))

    @field_validator("progress", mode="before")
    @classmethod
    def _clamp_progress(cls, value: object) -> float:
        if value is None:
            return 0.0
        return min(1.0, max(0.0, float(value)))

    @property
    def group(self) -> CategoryGroup:
        return group_of(self.category)

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)

    def identity_key(self) -> str:
        """Place id when known, otherwise name plus rounded coordinates."""
        if self.place_id:
            return self.place_id
        return f"{self.name}@{self.lat:.3f},{self.lng:.3f}"


class ScoredCandidate(Candidate):
    score: float = 0.0


class ItineraryDay(BaseModel):
    day_number: int = 1
    morning: list[ScoredCandidate] = Field(default_factory=list)
    lunch: Optional[ScoredCandidate] = None
    afternoon: list[ScoredCandidate] = Field(default_factory=list)
    lodging: Optional[ScoredCandidate] = None

    def placed(self) -> Iterator[tuple[TimeSlot, ScoredCandidate]]:
        for item in self.morning:
            yield TimeSlot.MORNING, item
        if self.lunch is not None:
            yield TimeSlot.LUNCH, self.lunch
        for item in self.afternoon:
            yield TimeSlot.AFTERNOON, item
        if self.lodging is not None:
            yield TimeSlot.LODGING, self.lodging


class RouteEndpoint(BaseModel):
    lat: float
    lng: float
    address: str = ""


class PlanResult(BaseModel):
    provider: Provider
    polyline: list[tuple[float, float]] = Field(default_factory=list)
    start: RouteEndpoint
    end: RouteEndpoint
    distance_text: str = ""
    duration_text: str = ""
    pois: list[ScoredCandidate] = Field(default_factory=list)
    itinerary: list[ItineraryDay] = Field(default_factory=list)
    trace_id: str = ""
