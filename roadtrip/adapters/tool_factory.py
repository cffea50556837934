"""Concrete tool selection and wiring."""

from __future__ import annotations

import logging
import os

from roadtrip.config.settings import strict_external_data_enabled
from roadtrip.security.key_manager import GOOGLE_MAPS_KEY, OPENWEATHER_KEY, get_key_manager
from roadtrip.shared.exceptions import ConfigurationError

_logger = logging.getLogger("roadtrip.tools")
_DEFAULT_ALLOWLIST = {"directions", "places", "geocoding", "osm", "weather"}


def _has_google_key() -> bool:
    return get_key_manager().has_key(GOOGLE_MAPS_KEY)


def _tool_allowlist() -> set[str]:
    raw = os.getenv("TOOL_ALLOWLIST", "")
    if not raw.strip():
        return set(_DEFAULT_ALLOWLIST)
    values = {item.strip().lower() for item in raw.split(",") if item.strip()}
    return values or set(_DEFAULT_ALLOWLIST)


def _ensure_tool_allowed(tool_name: str) -> None:
    if tool_name not in _tool_allowlist():
        raise ConfigurationError(f"Tool blocked by TOOL_ALLOWLIST: {tool_name}")


def _require_google(tool_name: str) -> None:
    _ensure_tool_allowed(tool_name)
    if not _has_google_key():
        raise ConfigurationError(f"[{tool_name}] requires {GOOGLE_MAPS_KEY}")


def get_directions_tool():
    _require_google("directions")
    from roadtrip.adapters.google import directions

    return directions


def get_places_tool():
    _require_google("places")
    from roadtrip.adapters.google import places

    return places


def get_geocoding_tool():
    _require_google("geocoding")
    from roadtrip.adapters.google import geocoding

    return geocoding


def get_fallback_route_tool():
    """OSM geocode + OSRM route; refused in strict mode."""
    _ensure_tool_allowed("osm")
    if strict_external_data_enabled():
        raise ConfigurationError(f"STRICT_EXTERNAL_DATA=true requires {GOOGLE_MAPS_KEY}")
    _logger.warning("%s not configured, routing falls back to OSM/OSRM without POIs", GOOGLE_MAPS_KEY)
    from roadtrip.adapters import osm

    return osm


def get_weather_tool():
    _ensure_tool_allowed("weather")
    if not get_key_manager().has_key(OPENWEATHER_KEY):
        raise ConfigurationError(f"{OPENWEATHER_KEY} missing")
    from roadtrip.adapters.weather import openweather

    return openweather


def describe_active_tools() -> dict[str, str]:
    google = _has_google_key()
    return {
        "directions": "google" if google else "osrm",
        "places": "google" if google else "disabled",
        "geocoding": "google" if google else "nominatim",
        "weather": "openweather" if get_key_manager().has_key(OPENWEATHER_KEY) else "disabled",
        "strict_external_data": "true" if strict_external_data_enabled() else "false",
    }


__all__ = [
    "describe_active_tools",
    "get_directions_tool",
    "get_fallback_route_tool",
    "get_geocoding_tool",
    "get_places_tool",
    "get_weather_tool",
]
