"""Single entrypoint for road-trip planning orchestration."""

from __future__ import annotations

import concurrent.futures
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from roadtrip.adapters import tool_factory
from roadtrip.application.context import PlanContext, make_plan_context
from roadtrip.application.contracts import PlanRequest, parse_plan_request
from roadtrip.config.settings import EngineSettings, google_configured, load_engine_settings
from roadtrip.domain.enums import Provider
from roadtrip.domain.models import GeoPoint, PlanResult, RouteEndpoint
from roadtrip.planner.assembly import assemble_itinerary
from roadtrip.planner.enrichment import enrich_selected
from roadtrip.planner.harvest import harvest
from roadtrip.planner.sampling import build_route_path, degenerate_path, is_single_city
from roadtrip.planner.scoring import rank_pool
from roadtrip.shared.exceptions import ConfigurationError, PlanTimeoutError
from roadtrip.tools.interfaces import (
    DirectionsTool,
    FallbackRouteTool,
    GeocodeTool,
    NearbySearchTool,
)


@dataclass
class PlanTools:
    """Collaborators for one request. Google tools and the OSM fallback are exclusive."""

    directions: Optional[DirectionsTool] = None
    places: Optional[NearbySearchTool] = None
    geocoder: Optional[GeocodeTool] = None
    fallback: Optional[FallbackRouteTool] = None


def resolve_plan_tools() -> PlanTools:
    if google_configured():
        return PlanTools(
            directions=tool_factory.get_directions_tool(),
            places=tool_factory.get_places_tool(),
            geocoder=tool_factory.get_geocoding_tool(),
        )
    return PlanTools(fallback=tool_factory.get_fallback_route_tool())


def _endpoint_point(endpoint: RouteEndpoint) -> GeoPoint:
    return GeoPoint(lat=endpoint.lat, lng=endpoint.lng)


def _plan_google(req: PlanRequest, tools: PlanTools, ctx: PlanContext) -> PlanResult:
    if tools.places is None:
        raise ConfigurationError("nearby search tool is not configured")

    ctx.checkpoint()
    ctx.logger.tool_call("directions", origin=req.origin, destination=req.destination)
    route = tools.directions.get_directions(req.origin, req.destination)

    start, end = _endpoint_point(route.start), _endpoint_point(route.end)
    if is_single_city(start, end):
        path = degenerate_path(start, ctx.settings.sampler)
        ctx.logger.warning("route", "origin and destination in the same city, using an artificial segment")
    else:
        path = build_route_path(route.path or [start, end], ctx.settings.sampler)

    harvest(path, tools.places, ctx)
    pool = rank_pool(ctx.pool)

    ctx.logger.stage_start("assembly", days=req.days, pool=len(pool))
    itinerary = assemble_itinerary(pool, req.days, ctx.settings.assembly, used=ctx.used)
    ctx.logger.stage_end("assembly", placed=len(ctx.used))

    if tools.geocoder is not None:
        itinerary, pool = enrich_selected(itinerary, pool, tools.geocoder, ctx)

    return PlanResult(
        provider=Provider.GOOGLE,
        polyline=[(p.lat, p.lng) for p in route.path],
        start=route.start,
        end=route.end,
        distance_text=route.distance_text,
        duration_text=route.duration_text,
        pois=pool,
        itinerary=itinerary,
        trace_id=ctx.trace_id,
    )


def _plan_fallback(req: PlanRequest, tools: PlanTools, ctx: PlanContext) -> PlanResult:
    """Route summary only; no POIs are harvested without Google Places."""
    fallback = tools.fallback
    ctx.checkpoint()
    ctx.logger.tool_call("osm_geocode", query=req.origin)
    origin = fallback.geocode(req.origin)
    ctx.checkpoint()
    ctx.logger.tool_call("osm_geocode", query=req.destination)
    destination = fallback.geocode(req.destination)
    ctx.checkpoint()
    ctx.logger.tool_call("osrm_route")
    route = fallback.route(GeoPoint(lat=origin.lat, lng=origin.lng), GeoPoint(lat=destination.lat, lng=destination.lng))

    return PlanResult(
        provider=Provider.OSRM,
        polyline=[(p.lat, p.lng) for p in route.path],
        start=RouteEndpoint(lat=origin.lat, lng=origin.lng, address=origin.formatted_address),
        end=RouteEndpoint(lat=destination.lat, lng=destination.lng, address=destination.formatted_address),
        distance_text=route.distance_text,
        duration_text=route.duration_text,
        trace_id=ctx.trace_id,
    )


def plan_trip(
    request: Union[PlanRequest, Mapping[str, Any]],
    ctx: Optional[PlanContext] = None,
    tools: Optional[PlanTools] = None,
) -> PlanResult:
    req = request if isinstance(request, PlanRequest) else parse_plan_request(request)
    ctx = ctx or make_plan_context()
    tools = tools or resolve_plan_tools()

    ctx.logger.stage_start("plan", origin=req.origin, destination=req.destination, days=req.days)
    if tools.directions is not None:
        result = _plan_google(req, tools, ctx)
    elif tools.fallback is not None:
        result = _plan_fallback(req, tools, ctx)
    else:
        raise ConfigurationError("no routing provider configured")
    ctx.logger.stage_end("plan", provider=result.provider.value)
    ctx.logger.summary(
        provider=result.provider.value,
        pois=len(result.pois),
        days=len(result.itinerary),
        failed_calls=ctx.failed_calls,
    )
    return result


def run_plan_with_timeout(
    request: Union[PlanRequest, Mapping[str, Any]],
    *,
    settings: Optional[EngineSettings] = None,
    tools: Optional[PlanTools] = None,
    timeout_seconds: Optional[float] = None,
    trace_id: Optional[str] = None,
    ctx: Optional[PlanContext] = None,
) -> PlanResult:
    """Run ``plan_trip`` in a worker thread under the request deadline.

    On timeout the request is cancelled, so the worker stops at its next
    external call, and ``PlanTimeoutError`` is raised to the caller. A caller
    that passes its own ``ctx`` can also cancel it from outside, e.g. when the
    client goes away.
    """
    req = request if isinstance(request, PlanRequest) else parse_plan_request(request)
    cfg = ctx.settings if ctx is not None else (settings or load_engine_settings())
    budget = timeout_seconds if timeout_seconds is not None else cfg.plan_timeout_seconds
    ctx = ctx or make_plan_context(cfg, timeout_seconds=budget, trace_id=trace_id)

    pool = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    future = pool.submit(plan_trip, req, ctx, tools)
    try:
        return future.result(timeout=budget)
    except concurrent.futures.TimeoutError:
        ctx.cancel()
        ctx.logger.error("plan", "timeout", timeout_seconds=budget)
        raise PlanTimeoutError(f"planning request timed out after {budget:.0f}s") from None
    finally:
        pool.shutdown(wait=False, cancel_futures=True)


__all__ = ["PlanTools", "plan_trip", "resolve_plan_tools", "run_plan_with_timeout"]
