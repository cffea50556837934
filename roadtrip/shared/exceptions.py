"""Shared (non-domain) exceptions.

Every error that can reach a caller carries a machine-readable ``kind`` and an
HTTP-style ``status_code`` so the API layer can render it without guessing.
"""


class PlannerError(Exception):
    """Base class for structured planning failures."""

    kind = "server_error"
    status_code = 500
    retryable = False

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {"error": self.kind, "detail": self.detail}
        if self.retryable:
            payload["retryable"] = True
        return payload


class ValidationError(PlannerError):
    """Missing or malformed request input; raised before any external call."""

    kind = "bad_request"
    status_code = 400


class UpstreamError(PlannerError):
    """External collaborator returned a hard failure."""

    kind = "upstream_error"
    status_code = 502

    def __init__(self, tool: str, message: str):
        self.tool = tool
        super().__init__(f"[{tool}] {message}")


class RouteNotFoundError(UpstreamError):
    """Routing service found no drivable route between the two places."""

    kind = "route_not_found"


class UpstreamTimeoutError(UpstreamError):
    """One external call ran past its own timeout, retries included."""

    kind = "timeout"
    status_code = 504
    retryable = True


class PlanTimeoutError(PlannerError):
    """An external call or the whole request exceeded its deadline."""

    kind = "timeout"
    status_code = 504
    retryable = True


class PlanCancelledError(PlannerError):
    """The caller abandoned the request; outstanding work stops at the next call."""

    kind = "cancelled"
    status_code = 499


class ConfigurationError(PlannerError):
    """Required credential or configuration is missing."""

    kind = "config_error"
    status_code = 500


class KeyMissingError(ConfigurationError):
    """Required key is missing."""

    def __init__(self, name: str):
        self.key_name = name
        super().__init__(f"Missing required API key: {name} (configure it in .env)")
