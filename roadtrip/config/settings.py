"""Runtime settings resolved from the environment."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


def _is_enabled(value: str | None) -> bool:
    return bool(value and value.strip().lower() in _TRUTHY)


def _is_configured(value: str | None) -> bool:
    return bool(value and value.strip())


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not _is_configured(raw):
        return default
    try:
        return float(str(raw).strip())
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not _is_configured(raw):
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


class SamplerSettings(BaseModel):
    min_samples: int = 10
    max_samples: int = 40
    km_per_sample: float = 20.0
    min_spacing_km: float = 3.0
    # Single-city trips get an artificial segment so progress bucketing still works.
    degenerate_offset_lat: float = -0.5
    degenerate_offset_lng: float = 0.2


class HarvestSettings(BaseModel):
    radius_m_per_km: float = 25.0
    radius_min_m: int = 5000
    radius_max_m: int = 25000
    food_radius_factor: float = 0.5
    food_radius_min_m: int = 3000
    lodging_radius_factor: float = 0.6
    lodging_radius_min_m: int = 5000
    keyword_radius_factor: float = 0.8
    keywords_per_probe: int = 4
    keyword_boost: float = 1.05
    attraction_pause_ms: int = 60
    search_pause_ms: int = 50
    workers: int = Field(default=1, ge=1)


class AssemblySettings(BaseModel):
    bucket_tolerance: float = 0.03
    backfill_tolerance: float = 0.1
    bucket_cap: int = 30
    picks_per_slot: int = 2
    distance_decay_km: float = 6.0


class EnrichmentSettings(BaseModel):
    pause_ms: int = 40


class EngineSettings(BaseModel):
    language: str = "zh-TW"
    region: str = "tw"
    plan_timeout_seconds: float = 45.0
    sampler: SamplerSettings = Field(default_factory=SamplerSettings)
    harvest: HarvestSettings = Field(default_factory=HarvestSettings)
    assembly: AssemblySettings = Field(default_factory=AssemblySettings)
    enrichment: EnrichmentSettings = Field(default_factory=EnrichmentSettings)


def load_engine_settings() -> EngineSettings:
    return EngineSettings(
        language=os.getenv("MAPS_LANGUAGE", "zh-TW").strip() or "zh-TW",
        region=os.getenv("MAPS_REGION", "tw").strip() or "tw",
        plan_timeout_seconds=_env_float("PLAN_TIMEOUT_SECONDS", 45.0),
        harvest=HarvestSettings(
            keyword_boost=_env_float("KEYWORD_BOOST", 1.05),
            workers=max(1, _env_int("HARVEST_WORKERS", 1)),
        ),
        assembly=AssemblySettings(
            bucket_tolerance=_env_float("BUCKET_TOLERANCE", 0.03),
            backfill_tolerance=_env_float("BACKFILL_TOLERANCE", 0.1),
        ),
    )


def google_configured() -> bool:
    return _is_configured(os.getenv("GOOGLE_MAPS_API_KEY"))


def weather_configured() -> bool:
    return _is_configured(os.getenv("OPENWEATHER_API_KEY"))


def strict_external_data_enabled() -> bool:
    return _is_enabled(os.getenv("STRICT_EXTERNAL_DATA"))


def resolve_route_provider() -> str:
    return "google" if google_configured() else "osrm"


class ProviderSnapshot(BaseModel):
    route_provider: str = Field(default="osrm")
    places_provider: str = Field(default="disabled")
    weather_provider: str = Field(default="disabled")
    strict_external_data: bool = Field(default=False)


def resolve_provider_snapshot() -> ProviderSnapshot:
    return ProviderSnapshot(
        route_provider=resolve_route_provider(),
        places_provider="google" if google_configured() else "disabled",
        weather_provider="openweather" if weather_configured() else "disabled",
        strict_external_data=strict_external_data_enabled(),
    )


__all__ = [
    "AssemblySettings",
    "EngineSettings",
    "EnrichmentSettings",
    "HarvestSettings",
    "ProviderSnapshot",
    "SamplerSettings",
    "google_configured",
    "load_engine_settings",
    "resolve_provider_snapshot",
    "resolve_route_provider",
    "strict_external_data_enabled",
    "weather_configured",
]
