"""Deterministic day-by-day itinerary assembly.

Attractions are bucketed by route progress, two picks each for morning and
afternoon; lunch and lodging are the best rated places near the day's picks.
A global backfill then tops up thin days, first from a widened progress
window and then from whatever attractions remain. A place never fills more
than one slot across the whole itinerary.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from roadtrip.config.settings import AssemblySettings
from roadtrip.domain.enums import CategoryGroup
from roadtrip.domain.models import GeoPoint, ItineraryDay, ScoredCandidate
from roadtrip.planner.distance import centroid, distance_km
from roadtrip.planner.scoring import rating_near


def _take(source: Iterable[ScoredCandidate], need: int, used: set[str]) -> list[ScoredCandidate]:
    out: list[ScoredCandidate] = []
    if need <= 0:
        return out
    for item in source:
        key = item.identity_key()
        if key in used:
            continue
        out.append(item)
        used.add(key)
        if len(out) >= need:
            break
    return out


def _best_near(
    anchor: GeoPoint,
    options: Sequence[ScoredCandidate],
    used: set[str],
    decay_km: float,
) -> Optional[ScoredCandidate]:
    best: Optional[ScoredCandidate] = None
    best_score = -1.0
    for option in options:
        if option.identity_key() in used:
            continue
        score = rating_near(option.rating, distance_km(anchor, option.point), decay_km=decay_km)
        if score > best_score:
            best_score = score
            best = option
    if best is not None:
        used.add(best.identity_key())
    return best


def _day_window(day_index: int, days: int) -> tuple[float, float]:
    return day_index / days, (day_index + 1) / days


def _fill(day: ItineraryDay, source: Sequence[ScoredCandidate], need: int, used: set[str]) -> None:
    day.morning.extend(_take(source, need - len(day.morning), used))
    day.afternoon.extend(_take(source, need - len(day.afternoon), used))


def _attach_meal_and_bed(
    day: ItineraryDay,
    restaurants: Sequence[ScoredCandidate],
    hotels: Sequence[ScoredCandidate],
    used: set[str],
    decay_km: float,
) -> None:
    picks = [p.point for p in (*day.morning, *day.afternoon)]
    if picks:
        day.lunch = _best_near(centroid(picks), restaurants, used, decay_km)

    anchor = day.afternoon[-1] if day.afternoon else (day.morning[-1] if day.morning else None)
    if anchor is not None:
        day.lodging = _best_near(anchor.point, hotels, used, decay_km)


def assemble_itinerary(
    pool: Sequence[ScoredCandidate],
    days: int,
    settings: Optional[AssemblySettings] = None,
    *,
    used: Optional[set[str]] = None,
) -> list[ItineraryDay]:
    """Split a route-ordered pool into ``days`` itinerary days.

    ``pool`` must already be in route order (progress ascending, score
    descending). ``used`` is the request's identity set; a fresh one is
    created when omitted so repeated calls on the same pool agree.
    """
    if days < 1:
        raise ValueError("days must be >= 1")
    cfg = settings or AssemblySettings()
    used = set() if used is None else used
    need = cfg.picks_per_slot

    attractions = [p for p in pool if p.group is CategoryGroup.ATTRACTION]
    restaurants = [p for p in pool if p.group is CategoryGroup.FOOD]
    hotels = [p for p in pool if p.group is CategoryGroup.LODGING]

    itinerary = [ItineraryDay(day_number=d + 1) for d in range(days)]

    for d, day in enumerate(itinerary):
        start, end = _day_window(d, days)
        tol = cfg.bucket_tolerance
        bucket = [p for p in attractions if start - tol <= p.progress < end + tol][: cfg.bucket_cap]
        day.morning = _take(bucket, need, used)
        day.afternoon = _take(bucket, need, used)

    by_progress = sorted(attractions, key=lambda p: p.progress)
    for d, day in enumerate(itinerary):
        if len(day.morning) >= need and len(day.afternoon) >= need:
            continue
        start, end = _day_window(d, days)
        wide = cfg.backfill_tolerance
        near = [p for p in by_progress if start - wide <= p.progress <= end + wide]
        _fill(day, near, need, used)
        _fill(day, by_progress, need, used)

    for day in itinerary:
        _attach_meal_and_bed(day, restaurants, hotels, used, cfg.distance_decay_km)

    return itinerary


def selected_place_ids(itinerary: Iterable[ItineraryDay]) -> list[str]:
    """Place ids of every slot of every day, first-seen order, no repeats."""
    seen: dict[str, None] = {}
    for day in itinerary:
        for _slot, item in day.placed():
            if item.place_id:
                seen.setdefault(item.place_id, None)
    return list(seen)
