"""Helpers for redacting credentials in logs and error strings."""

from __future__ import annotations

import re

_REDACTED = "***REDACTED***"

# Google Web Service keys travel as ?key=..., OpenWeather keys as ?appid=...
_QUERY_VALUE_RE = re.compile(
    r"(?i)(?P<prefix>\b(?:key|appid|api[_-]?key|token|secret|signature|password)\s*=\s*)(?P<value>[^&\s\"']+)"
)
_JSON_KV_RE = re.compile(
    r"(?i)(?P<prefix>[\"']?(?:api[_-]?key|appid|token|secret|password)[\"']?\s*:\s*[\"']?)(?P<value>[^\"',\s}]+)"
)
_BEARER_RE = re.compile(r"(?i)(?P<prefix>\bbearer\s+)(?P<value>[A-Za-z0-9._~+/=-]+)")
_GOOGLE_KEY_RE = re.compile(r"\bAIza[0-9A-Za-z_-]{35}\b")
_REDIS_CREDENTIAL_RE = re.compile(r"(?i)(?P<prefix>\brediss?://)(?P<creds>[^@/\s]+)@")


def _replace_value(pattern: re.Pattern[str], text: str) -> str:
    def repl(match: re.Match[str]) -> str:
        return f"{match.group('prefix')}{_REDACTED}"

    return pattern.sub(repl, text)


def redact_sensitive(text: str) -> str:
    """Redact credential patterns while preserving the surrounding context."""
    if not text:
        return text

    redacted = str(text)
    for pattern in (_QUERY_VALUE_RE, _JSON_KV_RE, _BEARER_RE):
        redacted = _replace_value(pattern, redacted)
    redacted = _GOOGLE_KEY_RE.sub(_REDACTED, redacted)
    redacted = _REDIS_CREDENTIAL_RE.sub(rf"\g<prefix>{_REDACTED}@", redacted)
    return redacted


__all__ = ["redact_sensitive"]
