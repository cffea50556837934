"""Google Directions 適配器：開車路線、總里程與預估時間

API 文件: https://developers.google.com/maps/documentation/directions
"""

from __future__ import annotations

from roadtrip.adapters.google import check_status, google_params
from roadtrip.domain.models import RouteEndpoint
from roadtrip.planner.polyline import decode_polyline
from roadtrip.security.http_client import SecureHttpClient
from roadtrip.shared.exceptions import RouteNotFoundError
from roadtrip.tools.interfaces import DirectionsResult

_BASE_URL = "https://maps.googleapis.com/maps/api/directions/json"
_TOOL = "google_directions"
_NO_ROUTE_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}

_http = SecureHttpClient(tool_name=_TOOL, quota_key="google", max_retries=1)


def get_directions(origin: str, destination: str) -> DirectionsResult:
    params = google_params(
        _TOOL,
        {"origin": origin, "destination": destination, "mode": "driving"},
        region=True,
    )
    data = _http.get(_BASE_URL, params=params)

    status = str(data.get("status") or "") if isinstance(data, dict) else ""
    if status in _NO_ROUTE_STATUSES:
        raise RouteNotFoundError(_TOOL, f"no driving route from {origin!r} to {destination!r}")
    check_status(_TOOL, data, allow_empty=False)

    routes = data.get("routes") or []
    if not routes or not (routes[0].get("legs") or []):
        raise RouteNotFoundError(_TOOL, f"no driving route from {origin!r} to {destination!r}")

    route = routes[0]
    leg = route["legs"][0]
    encoded = (route.get("overview_polyline") or {}).get("points") or ""
    start_loc = leg.get("start_location") or {}
    end_loc = leg.get("end_location") or {}

    return DirectionsResult(
        path=decode_polyline(encoded) if encoded else [],
        start=RouteEndpoint(
            lat=start_loc.get("lat", 0.0),
            lng=start_loc.get("lng", 0.0),
            address=leg.get("start_address") or origin,
        ),
        end=RouteEndpoint(
            lat=end_loc.get("lat", 0.0),
            lng=end_loc.get("lng", 0.0),
            address=leg.get("end_address") or destination,
        ),
        distance_text=(leg.get("distance") or {}).get("text", ""),
        duration_text=(leg.get("duration") or {}).get("text", ""),
    )
