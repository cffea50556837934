"""API request/response models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(default="ok")


class ErrorResponse(BaseModel):
    error: str = Field(description="machine-readable kind, e.g. bad_request / upstream_error / timeout")
    detail: str = Field(default="")


class NearbyLocation(BaseModel):
    lat: float
    lng: float


class NearbyItem(BaseModel):
    name: str = ""
    vicinity: Optional[str] = None
    place_id: str
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None
    type: str = Field(description="搜尋時使用的 place type")
    location: Optional[NearbyLocation] = None


class NearbyResponse(BaseModel):
    count: int = 0
    items: list[NearbyItem] = Field(default_factory=list)


class DiagnosticsResponse(BaseModel):
    tools: dict[str, str] = Field(default_factory=dict)
    providers: dict[str, Any] = Field(default_factory=dict)
    rate_limit: dict[str, Any] = Field(default_factory=dict)
