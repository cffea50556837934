"""Google Maps Platform web-service adapters.

環境變數: GOOGLE_MAPS_API_KEY, MAPS_LANGUAGE, MAPS_REGION
"""

from __future__ import annotations

from typing import Any

from roadtrip.config.settings import load_engine_settings
from roadtrip.security.key_manager import get_key_manager
from roadtrip.shared.exceptions import ConfigurationError, UpstreamError

# Statuses that mean "the query worked, nothing matched".
EMPTY_STATUSES = frozenset({"ZERO_RESULTS"})


def google_params(tool: str, raw: dict[str, Any], *, region: bool = False) -> dict[str, Any]:
    """Inject key and language (and region when asked) into request params."""
    key = get_key_manager().get_google_key(required=False)
    if not key:
        raise ConfigurationError(f"[{tool}] GOOGLE_MAPS_API_KEY is not configured")
    settings = load_engine_settings()
    params = {k: v for k, v in raw.items() if v is not None}
    params["language"] = settings.language
    if region:
        params["region"] = settings.region
    params["key"] = key
    return params


def check_status(tool: str, data: Any, *, allow_empty: bool = True) -> str:
    """Raise UpstreamError unless the payload status is OK (or empty, when allowed)."""
    if not isinstance(data, dict):
        raise UpstreamError(tool, "unexpected response body")
    status = str(data.get("status") or "UNKNOWN")
    if status == "OK" or (allow_empty and status in EMPTY_STATUSES):
        return status
    message = data.get("error_message") or status
    raise UpstreamError(tool, f"Google API returned {status}: {message}")


__all__ = ["EMPTY_STATUSES", "check_status", "google_params"]
