"""Application request contracts."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from roadtrip.domain.constants import DEFAULT_DAYS, MAX_DAYS, MIN_DAYS
from roadtrip.shared.exceptions import ValidationError


class PlanRequest(BaseModel):
    origin: str = Field(min_length=1, max_length=200)
    destination: str = Field(min_length=1, max_length=200)
    days: int = Field(default=DEFAULT_DAYS, ge=MIN_DAYS, le=MAX_DAYS)


def _coerce_days(raw: Any) -> int:
    if raw is None:
        return DEFAULT_DAYS
    if isinstance(raw, bool):
        raise ValidationError("days must be an integer")
    if isinstance(raw, int):
        days = raw
    elif isinstance(raw, float) and raw.is_integer():
        days = int(raw)
    elif isinstance(raw, str) and raw.strip().isdigit():
        days = int(raw.strip())
    else:
        raise ValidationError("days must be an integer")
    if not MIN_DAYS <= days <= MAX_DAYS:
        raise ValidationError(f"days must be between {MIN_DAYS} and {MAX_DAYS}")
    return days


def parse_plan_request(payload: Mapping[str, Any] | None) -> PlanRequest:
    """Validate a raw request body; nothing external is touched on failure."""
    if not isinstance(payload, Mapping):
        raise ValidationError("request body must be a JSON object")
    origin = payload.get("origin")
    destination = payload.get("destination")
    if not isinstance(origin, str) or not origin.strip():
        raise ValidationError("origin/destination required")
    if not isinstance(destination, str) or not destination.strip():
        raise ValidationError("origin/destination required")
    if len(origin.strip()) > 200 or len(destination.strip()) > 200:
        raise ValidationError("origin/destination too long")
    return PlanRequest(
        origin=origin.strip(),
        destination=destination.strip(),
        days=_coerce_days(payload.get("days")),
    )
