"""Google Geocoding 適配器：正向與反向地理編碼"""

from __future__ import annotations

from typing import Any

from roadtrip.adapters.google import check_status, google_params
from roadtrip.security.http_client import SecureHttpClient
from roadtrip.shared.exceptions import UpstreamError
from roadtrip.tools.interfaces import AddressComponent, GeocodeResult, ReverseGeocodeResult

_BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
_TOOL = "google_geocoding"

_http = SecureHttpClient(tool_name=_TOOL, quota_key="google", max_retries=1)


def _components(raw: dict[str, Any]) -> list[AddressComponent]:
    return [
        AddressComponent(
            long_name=c.get("long_name") or "",
            short_name=c.get("short_name") or "",
            types=list(c.get("types") or []),
        )
        for c in raw.get("address_components") or []
        if isinstance(c, dict)
    ]


def geocode(query: str) -> GeocodeResult:
    """Best match for ``query``; region-biased first, then unbiased."""
    for biased in (True, False):
        data = _http.get(_BASE_URL, params=google_params(_TOOL, {"address": query}, region=biased))
        check_status(_TOOL, data)
        results = data.get("results") or []
        if results:
            top = results[0]
            location = (top.get("geometry") or {}).get("location") or {}
            if "lat" in location and "lng" in location:
                return GeocodeResult(
                    lat=location["lat"],
                    lng=location["lng"],
                    formatted_address=top.get("formatted_address") or "",
                    components=_components(top),
                )
    raise UpstreamError(_TOOL, f"geocode found nothing for {query!r}")


def reverse_geocode(lat: float, lng: float) -> ReverseGeocodeResult:
    data = _http.get(_BASE_URL, params=google_params(_TOOL, {"latlng": f"{lat},{lng}"}))
    check_status(_TOOL, data)
    results = data.get("results") or []
    if not results:
        return ReverseGeocodeResult()
    top = results[0]
    return ReverseGeocodeResult(
        formatted_address=top.get("formatted_address") or "",
        components=_components(top),
    )
