"""OpenWeather 適配器：目前天氣與 5 日 / 3 小時預報

環境變數: OPENWEATHER_API_KEY
"""

from __future__ import annotations

import re
from typing import Any, Optional

from roadtrip.security.http_client import SecureHttpClient
from roadtrip.security.key_manager import get_key_manager
from roadtrip.shared.exceptions import ConfigurationError, UpstreamError, ValidationError
from roadtrip.tools.interfaces import WeatherQuery

_CURRENT_URL = "https://api.openweathermap.org/data/2.5/weather"
_FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"
_TOOL = "openweather"

UNITS = ("standard", "metric", "imperial")
_CITY_CHARS_RE = re.compile(r"[^\w\s,.\-]|_", re.UNICODE)
_MAX_QUERY_CHARS = 60

_http = SecureHttpClient(tool_name=_TOOL, quota_key="openweather", max_retries=1)


def sanitize_city(raw: str) -> str:
    """Keep letters, digits, whitespace and ``,.-``; at most 60 characters."""
    return _CITY_CHARS_RE.sub("", raw).strip()[:_MAX_QUERY_CHARS]


def valid_lat_lon(lat: Optional[float], lon: Optional[float]) -> bool:
    if lat is None or lon is None:
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def build_query(
    q: Optional[str] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    units: Optional[str] = None,
    lang: Optional[str] = None,
) -> WeatherQuery:
    city = sanitize_city(q) if q else None
    has_coords = valid_lat_lon(lat, lon)
    if not city and not has_coords:
        raise ValidationError("需要 q 或有效的 lat+lon")
    return WeatherQuery(
        q=city or None,
        lat=lat if has_coords else None,
        lon=lon if has_coords else None,
        units=units if units in UNITS else "metric",
        lang=(lang or "zh_tw").lower(),
    )


def _params(query: WeatherQuery) -> dict[str, Any]:
    key = get_key_manager().get_openweather_key(required=False)
    if not key:
        raise ConfigurationError("OPENWEATHER_API_KEY missing")
    params: dict[str, Any] = {"appid": key, "units": query.units, "lang": query.lang}
    if query.q:
        params["q"] = query.q
    if query.lat is not None and query.lon is not None:
        params["lat"] = query.lat
        params["lon"] = query.lon
    return params


def _fetch(url: str, query: WeatherQuery) -> dict[str, Any]:
    data = _http.get(url, params=_params(query))
    if not isinstance(data, dict):
        raise UpstreamError(_TOOL, "unexpected response body")
    return data


def current(query: WeatherQuery) -> dict[str, Any]:
    return _fetch(_CURRENT_URL, query)


def forecast(query: WeatherQuery) -> dict[str, Any]:
    return _fetch(_FORECAST_URL, query)
