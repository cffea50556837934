"""Tool selection tests."""

from __future__ import annotations

import pytest

from roadtrip.adapters import tool_factory
from roadtrip.security.key_manager import get_key_manager
from roadtrip.shared.exceptions import ConfigurationError


@pytest.fixture
def google_key(monkeypatch):
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "TEST_FAKE_GOOGLE_KEY")
    get_key_manager().reload("GOOGLE_MAPS_API_KEY")


def test_google_tools_need_key():
    with pytest.raises(ConfigurationError):
        tool_factory.get_directions_tool()
    with pytest.raises(ConfigurationError):
        tool_factory.get_places_tool()


def test_google_tools_with_key(google_key):
    assert tool_factory.get_directions_tool().__name__ == "roadtrip.adapters.google.directions"
    assert tool_factory.get_places_tool().__name__ == "roadtrip.adapters.google.places"
    assert tool_factory.get_geocoding_tool().__name__ == "roadtrip.adapters.google.geocoding"


def test_fallback_allowed_unless_strict(monkeypatch):
    assert tool_factory.get_fallback_route_tool().__name__ == "roadtrip.adapters.osm"
    monkeypatch.setenv("STRICT_EXTERNAL_DATA", "true")
    with pytest.raises(ConfigurationError):
        tool_factory.get_fallback_route_tool()


def test_allowlist_blocks_tools(google_key, monkeypatch):
    monkeypatch.setenv("TOOL_ALLOWLIST", "directions, osm")
    assert tool_factory.get_directions_tool() is not None
    with pytest.raises(ConfigurationError):
        tool_factory.get_places_tool()


def test_weather_tool_needs_key(monkeypatch):
    with pytest.raises(ConfigurationError):
        tool_factory.get_weather_tool()
    monkeypatch.setenv("OPENWEATHER_API_KEY", "TEST_FAKE_OW_KEY")
    get_key_manager().reload("OPENWEATHER_API_KEY")
    assert tool_factory.get_weather_tool().__name__ == "roadtrip.adapters.weather.openweather"


def test_describe_active_tools(google_key):
    described = tool_factory.describe_active_tools()
    assert described["directions"] == "google"
    assert described["weather"] == "disabled"
    assert described["strict_external_data"] == "false"
