"""Great-circle distance helpers."""

from __future__ import annotations

import math
from typing import Sequence

from roadtrip.domain.models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.asin(min(1.0, math.sqrt(a)))


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    return haversine(a.lat, a.lng, b.lat, b.lng)


def cumulative_length_km(points: Sequence[GeoPoint]) -> list[float]:
    if not points:
        return []
    acc = [0.0]
    for prev, cur in zip(points, points[1:]):
        acc.append(acc[-1] + distance_km(prev, cur))
    return acc


def centroid(points: Sequence[GeoPoint]) -> GeoPoint:
    """Arithmetic mean of lat/lng; callers pass at least one point."""
    n = len(points)
    return GeoPoint(
        lat=sum(p.lat for p in points) / n,
        lng=sum(p.lng for p in points) / n,
    )
