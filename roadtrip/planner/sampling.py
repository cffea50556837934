"""Route geometry sampling: probes for nearby search and route progress."""

from __future__ import annotations

import math
from bisect import bisect_left
from typing import Optional, Sequence

from roadtrip.config.settings import SamplerSettings
from roadtrip.domain.constants import NEAR_EQUAL_KM
from roadtrip.domain.models import GeoPoint, RoutePath, SearchProbe
from roadtrip.planner.distance import cumulative_length_km, distance_km


def is_single_city(start: GeoPoint, end: GeoPoint, threshold_km: float = NEAR_EQUAL_KM) -> bool:
    return distance_km(start, end) <= threshold_km


def degenerate_path(start: GeoPoint, settings: Optional[SamplerSettings] = None) -> RoutePath:
    """Artificial segment from ``start``, one vertex per km.

    The vertices are dense so that ``progress_of`` yields intermediate
    fractions and day bucketing still spreads places over every day.
    """
    cfg = settings or SamplerSettings()
    offset = GeoPoint(
        lat=start.lat + cfg.degenerate_offset_lat,
        lng=start.lng + cfg.degenerate_offset_lng,
    )
    steps = max(1, math.ceil(distance_km(start, offset)))
    points = tuple(
        GeoPoint(
            lat=start.lat + (offset.lat - start.lat) * i / steps,
            lng=start.lng + (offset.lng - start.lng) * i / steps,
        )
        for i in range(steps)
    ) + (offset,)
    return RoutePath(points=points, cumulative_km=tuple(cumulative_length_km(points)))


def build_route_path(points: Sequence[GeoPoint], settings: Optional[SamplerSettings] = None) -> RoutePath:
    """Freeze ``points`` into a RoutePath; a zero-length route becomes degenerate."""
    if not points:
        raise ValueError("route path needs at least one point")
    cumulative = cumulative_length_km(points)
    if len(points) < 2 or cumulative[-1] <= 0:
        return degenerate_path(points[0], settings)
    return RoutePath(points=tuple(points), cumulative_km=tuple(cumulative))


def sample_count(total_km: float, settings: Optional[SamplerSettings] = None) -> int:
    cfg = settings or SamplerSettings()
    wanted = math.ceil(total_km / cfg.km_per_sample) + cfg.min_samples
    return max(cfg.min_samples, min(cfg.max_samples, wanted))


def _interpolate(path: RoutePath, target_km: float) -> GeoPoint:
    cum = path.cumulative_km
    j = bisect_left(cum, target_km)
    if j == 0:
        return path.points[0]
    if j >= len(cum):
        return path.points[-1]
    t0, t1 = cum[j - 1], cum[j]
    a, b = path.points[j - 1], path.points[j]
    r = 0.0 if t1 == t0 else (target_km - t0) / (t1 - t0)
    return GeoPoint(lat=a.lat + (b.lat - a.lat) * r, lng=a.lng + (b.lng - a.lng) * r)


def sample_probes(path: RoutePath, settings: Optional[SamplerSettings] = None) -> list[SearchProbe]:
    """Evenly progressed probes along ``path``, none within the spacing of another."""
    cfg = settings or SamplerSettings()
    if not path.points:
        return []
    total = path.total_km
    n = sample_count(total, cfg)

    accepted: list[SearchProbe] = []
    for i in range(n):
        point = _interpolate(path, (i / (n - 1)) * total)
        if any(distance_km(point, q) < cfg.min_spacing_km for q in accepted):
            continue
        accepted.append(SearchProbe(lat=point.lat, lng=point.lng, index=i))
    return accepted


def progress_of(path: RoutePath, point: GeoPoint) -> float:
    """Fraction of the route covered at the vertex nearest to ``point``."""
    best = math.inf
    best_idx = 0
    for idx, vertex in enumerate(path.points):
        d = distance_km(point, vertex)
        if d < best:
            best = d
            best_idx = idx
    total = path.total_km or 1.0
    return max(0.0, min(1.0, path.cumulative_km[best_idx] / total))
