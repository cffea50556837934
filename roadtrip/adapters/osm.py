"""OpenStreetMap 備援：Nominatim 地理編碼 + OSRM 開車路線

沒有 GOOGLE_MAPS_API_KEY 時只回傳路線摘要，不做 POI 採集。
"""

from __future__ import annotations

from roadtrip.config.settings import load_engine_settings
from roadtrip.domain.models import GeoPoint, RouteEndpoint
from roadtrip.security.http_client import SecureHttpClient
from roadtrip.shared.exceptions import RouteNotFoundError, UpstreamError
from roadtrip.tools.interfaces import DirectionsResult, GeocodeResult

_NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
_OSRM_URL = "https://router.project-osrm.org/route/v1/driving/{coords}"
_USER_AGENT = "roadtrip-planner/0.1"

_geo_http = SecureHttpClient(tool_name="osm_nominatim", quota_key="osm", max_retries=1)
_route_http = SecureHttpClient(tool_name="osm_osrm", quota_key="osm", max_retries=1)


def geocode(query: str) -> GeocodeResult:
    headers = {"Accept-Language": load_engine_settings().language, "User-Agent": _USER_AGENT}
    data = _geo_http.get(
        _NOMINATIM_URL,
        params={"format": "json", "q": query, "addressdetails": 1, "limit": 1},
        headers=headers,
    )
    if not isinstance(data, list) or not data:
        raise UpstreamError("osm_nominatim", f"geocode found nothing for {query!r}")
    top = data[0]
    try:
        lat, lng = float(top["lat"]), float(top["lon"])
    except (KeyError, TypeError, ValueError):
        raise UpstreamError("osm_nominatim", "result without coordinates") from None
    return GeocodeResult(lat=lat, lng=lng, formatted_address=top.get("display_name") or query)


def format_distance(meters: float) -> str:
    return f"{meters / 1000:.1f} km"


def format_duration(seconds: float) -> str:
    return f"{round(seconds / 60)} 分鐘"


def route(origin: GeoPoint, destination: GeoPoint) -> DirectionsResult:
    # OSRM 座標順序為 lng,lat
    coords = f"{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
    data = _route_http.get(
        _OSRM_URL.format(coords=coords),
        params={"overview": "full", "geometries": "geojson"},
    )
    routes = data.get("routes") if isinstance(data, dict) else None
    if not routes:
        raise RouteNotFoundError("osm_osrm", str((data or {}).get("code") or "no route"))
    best = routes[0]
    coordinates = (best.get("geometry") or {}).get("coordinates") or []
    path = [GeoPoint(lat=lat, lng=lng) for lng, lat, *_ in coordinates]
    return DirectionsResult(
        path=path,
        start=RouteEndpoint(lat=origin.lat, lng=origin.lng),
        end=RouteEndpoint(lat=destination.lat, lng=destination.lng),
        distance_text=format_distance(float(best.get("distance") or 0.0)),
        duration_text=format_duration(float(best.get("duration") or 0.0)),
    )
