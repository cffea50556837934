"""POI harvesting along a route.

Every probe is searched once per category; attraction categories are also
searched with the leading keywords of ``ATTRACTION_KEYWORDS``. Cells run one
after another with a short pause, or in a bounded thread pool when
``HarvestSettings.workers > 1``. Either way results are merged in cell order,
so the pool does not depend on which worker finished first.
"""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

from roadtrip.config.settings import HarvestSettings
from roadtrip.domain.constants import (
    ATTRACTION_CATEGORIES,
    ATTRACTION_KEYWORDS,
    FOOD_CATEGORIES,
    LODGING_CATEGORIES,
)
from roadtrip.domain.enums import Category
from roadtrip.domain.models import Candidate, GeoPoint, RoutePath, SearchProbe
from roadtrip.planner.distance import distance_km
from roadtrip.planner.sampling import progress_of, sample_probes
from roadtrip.planner.scoring import CandidatePool, score_place
from roadtrip.shared.exceptions import PlannerError, UpstreamError
from roadtrip.tools.interfaces import NearbyPlace, NearbySearchInput, NearbySearchTool

if TYPE_CHECKING:
    from roadtrip.application.context import PlanContext

_logger = logging.getLogger("roadtrip.harvest")


@dataclass(frozen=True)
class SearchRadii:
    attraction: int
    keyword: int
    food: int
    lodging: int


@dataclass(frozen=True)
class SearchCell:
    probe: SearchProbe
    category: Category
    radius_m: int
    keyword: Optional[str] = None
    boost: float = 1.0
    pause_ms: int = 50


def radius_policy(total_km: float, settings: Optional[HarvestSettings] = None) -> SearchRadii:
    cfg = settings or HarvestSettings()
    base = min(cfg.radius_max_m, max(cfg.radius_min_m, round(total_km * cfg.radius_m_per_km)))
    return SearchRadii(
        attraction=base,
        keyword=round(base * cfg.keyword_radius_factor),
        food=max(cfg.food_radius_min_m, round(base * cfg.food_radius_factor)),
        lodging=max(cfg.lodging_radius_min_m, round(base * cfg.lodging_radius_factor)),
    )


def plan_cells(
    probes: Sequence[SearchProbe],
    radii: SearchRadii,
    settings: Optional[HarvestSettings] = None,
    keywords: Sequence[str] = ATTRACTION_KEYWORDS,
) -> list[SearchCell]:
    """Search cells in request order: attractions, then food, then lodging."""
    cfg = settings or HarvestSettings()
    leading_keywords = list(keywords)[: cfg.keywords_per_probe]
    cells: list[SearchCell] = []

    for probe in probes:
        for category in ATTRACTION_CATEGORIES:
            cells.append(SearchCell(probe, category, radii.attraction, pause_ms=cfg.attraction_pause_ms))
            for keyword in leading_keywords:
                cells.append(
                    SearchCell(
                        probe,
                        category,
                        radii.keyword,
                        keyword=keyword,
                        boost=cfg.keyword_boost,
                        pause_ms=cfg.search_pause_ms,
                    )
                )
    for probe in probes:
        for category in FOOD_CATEGORIES:
            cells.append(SearchCell(probe, category, radii.food, pause_ms=cfg.search_pause_ms))
    for probe in probes:
        for category in LODGING_CATEGORIES:
            cells.append(SearchCell(probe, category, radii.lodging, pause_ms=cfg.search_pause_ms))
    return cells


def to_candidate(place: NearbyPlace, category: Category, path: RoutePath) -> Optional[Candidate]:
    """Decode one search hit; records without id or location are dropped."""
    if not place.place_id or not place.has_location:
        return None
    location = GeoPoint(lat=place.lat, lng=place.lng)
    return Candidate(
        place_id=place.place_id,
        name=place.name,
        lat=location.lat,
        lng=location.lng,
        category=category,
        address=place.vicinity,
        rating=place.rating,
        user_ratings_total=place.user_ratings_total,
        progress=progress_of(path, location),
    )


def run_cell(
    cell: SearchCell,
    tool: NearbySearchTool,
    path: RoutePath,
    ctx: "PlanContext",
) -> list[tuple[Candidate, float]]:
    ctx.checkpoint()
    params = NearbySearchInput(
        lat=cell.probe.lat,
        lng=cell.probe.lng,
        radius_m=cell.radius_m,
        place_type=cell.category.value,
        keyword=cell.keyword,
    )
    try:
        places = tool.search_nearby(params)
    except UpstreamError as exc:
        # One failed cell contributes nothing; the harvest carries on.
        ctx.record_failure()
        ctx.logger.warning(
            "harvest",
            exc.detail,
            probe=cell.probe.index,
            category=cell.category.value,
            keyword=cell.keyword,
        )
        places = []
    finally:
        ctx.pause(cell.pause_ms)

    scored: list[tuple[Candidate, float]] = []
    for place in places:
        candidate = to_candidate(place, cell.category, path)
        if candidate is None:
            continue
        d = distance_km(cell.probe, candidate.point)
        score = score_place(candidate.rating, candidate.user_ratings_total, d) * cell.boost
        scored.append((candidate, score))
    return scored


def harvest(path: RoutePath, tool: NearbySearchTool, ctx: "PlanContext") -> CandidatePool:
    """Fill ``ctx.pool`` with the best-scoring candidate per place id."""
    cfg = ctx.settings.harvest
    ctx.probes = sample_probes(path, ctx.settings.sampler)
    radii = radius_policy(distance_km(path.start, path.end), cfg)
    cells = plan_cells(ctx.probes, radii, cfg)

    ctx.logger.stage_start("harvest", probes=len(ctx.probes), cells=len(cells), radius_m=radii.attraction)
    if cfg.workers <= 1:
        for cell in cells:
            ctx.pool.merge(run_cell(cell, tool, path, ctx))
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=cfg.workers) as pool:
            try:
                for scored in pool.map(lambda c: run_cell(c, tool, path, ctx), cells):
                    ctx.pool.merge(scored)
            except PlannerError:
                ctx.cancel()
                raise
    ctx.logger.stage_end("harvest", candidates=len(ctx.pool), failed_calls=ctx.failed_calls)
    if ctx.failed_calls:
        _logger.warning("harvest finished with %d failed search cells", ctx.failed_calls)
    return ctx.pool
