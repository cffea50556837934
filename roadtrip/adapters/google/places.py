"""Google Places 適配器：Nearby Search 與 Place Details

API 文件: https://developers.google.com/maps/documentation/places/web-service
"""

from __future__ import annotations

from typing import Any

from roadtrip.adapters.google import check_status, google_params
from roadtrip.security.http_client import SecureHttpClient
from roadtrip.tools.interfaces import NearbyPlace, NearbySearchInput, PlaceDetails

_NEARBY_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
_DETAILS_URL = "https://maps.googleapis.com/maps/api/place/details/json"
_TOOL = "google_places"

DETAIL_FIELDS = (
    "name",
    "website",
    "formatted_phone_number",
    "formatted_address",
    "rating",
    "user_ratings_total",
    "opening_hours",
    "geometry/location",
    "url",
)

_http = SecureHttpClient(tool_name=_TOOL, quota_key="google", max_retries=1)


def _to_place(raw: dict[str, Any]) -> NearbyPlace:
    location = (raw.get("geometry") or {}).get("location") or {}
    return NearbyPlace(
        place_id=raw.get("place_id") or None,
        name=raw.get("name") or "",
        lat=location.get("lat"),
        lng=location.get("lng"),
        vicinity=raw.get("vicinity") or raw.get("formatted_address"),
        rating=raw.get("rating"),
        user_ratings_total=raw.get("user_ratings_total"),
    )


def search_nearby(params: NearbySearchInput) -> list[NearbyPlace]:
    """One Nearby Search page. ZERO_RESULTS is an empty list, other failures raise."""
    request = google_params(
        _TOOL,
        {
            "location": f"{params.lat},{params.lng}",
            "radius": params.radius_m,
            "type": params.place_type,
            "keyword": params.keyword,
        },
    )
    data = _http.get(_NEARBY_URL, params=request)
    check_status(_TOOL, data)
    results = data.get("results") or []
    return [_to_place(r) for r in results if isinstance(r, dict)]


def get_place_details(place_id: str) -> PlaceDetails:
    request = google_params(_TOOL, {"place_id": place_id, "fields": ",".join(DETAIL_FIELDS)})
    data = _http.get(_DETAILS_URL, params=request)
    check_status(_TOOL, data, allow_empty=False)
    result = data.get("result") or {}
    return PlaceDetails(**{k: result.get(k) for k in PlaceDetails.model_fields})
