"""Infrastructure services and cross-cutting utilities."""

from roadtrip.infrastructure.logging import StructuredLogger
from roadtrip.infrastructure.rate_limiter import acquire, get_rate_limiter, get_upstream_limiter

__all__ = ["StructuredLogger", "acquire", "get_rate_limiter", "get_upstream_limiter"]
