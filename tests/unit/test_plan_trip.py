"""End-to-end planning tests with fake collaborators."""

from __future__ import annotations

import io
import threading
import time

import pytest

from roadtrip.application.context import make_plan_context
from roadtrip.application.plan_trip import PlanTools, plan_trip, run_plan_with_timeout
from roadtrip.config.settings import EngineSettings, EnrichmentSettings, HarvestSettings
from roadtrip.domain.enums import Provider
from roadtrip.domain.models import RouteEndpoint, GeoPoint
from roadtrip.infrastructure.logging import StructuredLogger
from roadtrip.shared.exceptions import (
    ConfigurationError,
    PlanCancelledError,
    PlanTimeoutError,
    RouteNotFoundError,
    ValidationError,
)
from roadtrip.tools.interfaces import (
    AddressComponent,
    DirectionsResult,
    GeocodeResult,
    NearbyPlace,
    ReverseGeocodeResult,
)

TAIPEI = (25.0478, 121.5170)
KENTING = (21.9486, 120.7797)


def _fast_settings() -> EngineSettings:
    return EngineSettings(
        harvest=HarvestSettings(attraction_pause_ms=0, search_pause_ms=0),
        enrichment=EnrichmentSettings(pause_ms=0),
    )


def _ctx(settings: EngineSettings | None = None):
    log = io.StringIO()
    ctx = make_plan_context(
        settings or _fast_settings(),
        timeout_seconds=60,
        logger=StructuredLogger(trace_id="plan-test", output=log),
    )
    return ctx, log


def _line(a: tuple[float, float], b: tuple[float, float], n: int = 30) -> list[GeoPoint]:
    return [
        GeoPoint(lat=a[0] + (b[0] - a[0]) * i / (n - 1), lng=a[1] + (b[1] - a[1]) * i / (n - 1))
        for i in range(n)
    ]


class FakeDirections:
    def __init__(self, start=TAIPEI, end=KENTING, path=None, error=None):
        self.calls = []
        self._start, self._end = start, end
        self._path = path if path is not None else _line(start, end)
        self._error = error

    def get_directions(self, origin, destination):
        self.calls.append((origin, destination))
        if self._error is not None:
            raise self._error
        return DirectionsResult(
            path=self._path,
            start=RouteEndpoint(lat=self._start[0], lng=self._start[1], address=origin),
            end=RouteEndpoint(lat=self._end[0], lng=self._end[1], address=destination),
            distance_text="334 公里",
            duration_text="4 小時 40 分鐘",
        )


class FakePlaces:
    """Every search returns one place right next to the probe."""

    def __init__(self):
        self.calls = []

    def search_nearby(self, params):
        self.calls.append(params)
        tag = f"{params.place_type}:{params.keyword or '-'}:{params.lat:.4f},{params.lng:.4f}"
        return [
            NearbyPlace(
                place_id=tag,
                name=tag,
                lat=params.lat + 0.001,
                lng=params.lng,
                vicinity="中山路 1 號",
                rating=4.5,
                user_ratings_total=120,
            )
        ]


class FakeGeocoder:
    def __init__(self):
        self.reverse_calls = 0

    def geocode(self, query):
        raise AssertionError("forward geocoding is not used on the Google path")

    def reverse_geocode(self, lat, lng):
        self.reverse_calls += 1
        return ReverseGeocodeResult(
            formatted_address="屏東縣恆春鎮中山路1號",
            components=[
                AddressComponent(long_name="恆春鎮", types=["administrative_area_level_3", "political"]),
                AddressComponent(long_name="屏東縣", types=["administrative_area_level_2", "political"]),
            ],
        )


class FakeFallback:
    def __init__(self):
        self.queries = []

    def geocode(self, query):
        self.queries.append(query)
        lat, lng = TAIPEI if not self.queries[1:] else KENTING
        return GeocodeResult(lat=lat, lng=lng, formatted_address=f"{query} (OSM)")

    def route(self, origin, destination):
        return DirectionsResult(
            path=[origin, destination],
            start=RouteEndpoint(lat=origin.lat, lng=origin.lng),
            end=RouteEndpoint(lat=destination.lat, lng=destination.lng),
            distance_text="334.5 km",
            duration_text="280 分鐘",
        )


def _google_tools(**kw) -> PlanTools:
    return PlanTools(
        directions=kw.get("directions") or FakeDirections(),
        places=kw.get("places") or FakePlaces(),
        geocoder=kw.get("geocoder") or FakeGeocoder(),
    )


def test_google_plan_fills_every_day():
    ctx, _ = _ctx()
    geocoder = FakeGeocoder()
    result = plan_trip({"origin": "台北車站", "destination": "墾丁", "days": 5}, ctx, _google_tools(geocoder=geocoder))

    assert result.provider is Provider.GOOGLE
    assert result.trace_id == "plan-test"
    assert result.distance_text == "334 公里"
    assert len(result.polyline) == 30
    assert len(result.itinerary) == 5
    assert result.pois

    keys = []
    for day in result.itinerary:
        assert len(day.morning) == 2 and len(day.afternoon) == 2
        assert day.lunch is not None and day.lodging is not None
        keys.extend(item.identity_key() for _slot, item in day.placed())
    assert len(keys) == len(set(keys)) == 30
    assert geocoder.reverse_calls == 30


def test_google_plan_days_follow_the_route():
    ctx, _ = _ctx()
    result = plan_trip({"origin": "台北車站", "destination": "墾丁", "days": 5}, ctx, _google_tools())

    first = [p.progress for p in result.itinerary[0].morning]
    last = [p.progress for p in result.itinerary[-1].afternoon]
    assert max(first) < min(last)


def test_selected_places_get_city_and_district():
    ctx, _ = _ctx()
    result = plan_trip({"origin": "台北車站", "destination": "墾丁", "days": 2}, ctx, _google_tools())

    day = result.itinerary[0]
    assert day.morning[0].address == "屏東縣 · 恆春鎮 · 中山路 1 號"
    assert day.morning[0].city == "屏東縣"
    selected = {item.place_id for d in result.itinerary for _s, item in d.placed()}
    untouched = [p for p in result.pois if p.place_id not in selected]
    assert untouched and all(p.address == "中山路 1 號" for p in untouched)
    assert all(p.address.startswith("屏東縣 · ") for p in result.pois if p.place_id in selected)


def test_same_city_trip_uses_artificial_segment():
    ctx, log = _ctx()
    directions = FakeDirections(start=TAIPEI, end=TAIPEI, path=[GeoPoint(lat=TAIPEI[0], lng=TAIPEI[1])])
    result = plan_trip({"origin": "台北101", "destination": "台北車站", "days": 3}, ctx, _google_tools(directions=directions))

    assert len(ctx.probes) >= 2
    assert min(p.lat for p in ctx.probes) < TAIPEI[0] - 0.4
    assert result.polyline == [TAIPEI]
    assert all(day.morning for day in result.itinerary)
    assert all(0.0 < p.progress < 1.0 for p in result.itinerary[1].morning)
    assert "same city" in log.getvalue()


def test_route_not_found_stops_before_harvest():
    ctx, _ = _ctx()
    places = FakePlaces()
    tools = _google_tools(
        directions=FakeDirections(error=RouteNotFoundError("google_directions", "ZERO_RESULTS")),
        places=places,
    )
    with pytest.raises(RouteNotFoundError):
        plan_trip({"origin": "台北", "destination": "東京"}, ctx, tools)
    assert places.calls == []


def test_cancelled_request_makes_no_calls():
    ctx, _ = _ctx()
    ctx.cancel()
    directions = FakeDirections()
    with pytest.raises(PlanCancelledError):
        plan_trip({"origin": "台北", "destination": "墾丁"}, ctx, _google_tools(directions=directions))
    assert directions.calls == []


def test_invalid_request_fails_before_tool_resolution(monkeypatch):
    monkeypatch.setenv("STRICT_EXTERNAL_DATA", "true")
    with pytest.raises(ValidationError):
        plan_trip({"origin": "", "destination": "墾丁"})


def test_fallback_returns_route_summary_only():
    ctx, _ = _ctx()
    fallback = FakeFallback()
    result = plan_trip({"origin": "台北車站", "destination": "墾丁"}, ctx, PlanTools(fallback=fallback))

    assert result.provider is Provider.OSRM
    assert result.pois == [] and result.itinerary == []
    assert fallback.queries == ["台北車站", "墾丁"]
    assert result.start.address == "台北車站 (OSM)"
    assert result.duration_text == "280 分鐘"
    assert result.polyline == [TAIPEI, KENTING]


def test_strict_mode_without_google_key(monkeypatch):
    monkeypatch.setenv("STRICT_EXTERNAL_DATA", "true")
    ctx, _ = _ctx()
    with pytest.raises(ConfigurationError):
        plan_trip({"origin": "台北", "destination": "墾丁"}, ctx)


def test_run_plan_with_timeout_returns_result():
    result = run_plan_with_timeout(
        {"origin": "台北車站", "destination": "墾丁", "days": 3},
        settings=_fast_settings(),
        tools=_google_tools(),
        trace_id="abc123",
    )
    assert result.trace_id == "abc123"
    assert len(result.itinerary) == 3


class SlowDirections(FakeDirections):
    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def get_directions(self, origin, destination):
        self.release.wait(5)
        return super().get_directions(origin, destination)


def test_run_plan_with_timeout_cancels_slow_request():
    directions = SlowDirections()
    places = FakePlaces()
    started = time.monotonic()
    with pytest.raises(PlanTimeoutError) as exc:
        run_plan_with_timeout(
            {"origin": "台北", "destination": "墾丁"},
            settings=_fast_settings(),
            tools=_google_tools(directions=directions, places=places),
            timeout_seconds=0.2,
        )
    assert exc.value.status_code == 504
    assert time.monotonic() - started < 2

    # 逾時後 worker 在下一次外部呼叫前停下
    directions.release.set()
    time.sleep(0.2)
    assert places.calls == []
