"""Configuration helpers."""

from roadtrip.config.settings import EngineSettings, load_engine_settings, resolve_provider_snapshot

__all__ = ["EngineSettings", "load_engine_settings", "resolve_provider_snapshot"]
