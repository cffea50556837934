"""Shared cross-layer types and exceptions."""

from roadtrip.shared.exceptions import (
    ConfigurationError,
    KeyMissingError,
    PlanCancelledError,
    PlannerError,
    PlanTimeoutError,
    RouteNotFoundError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)

__all__ = [
    "ConfigurationError",
    "KeyMissingError",
    "PlanCancelledError",
    "PlannerError",
    "PlanTimeoutError",
    "RouteNotFoundError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "ValidationError",
]
