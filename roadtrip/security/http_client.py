"""安全 HTTP 客戶端：所有外部 API 呼叫的統一出口

職責：
  1. 例外訊息自動脫敏，不洩漏 API Key
  2. 統一逾時 / 重試上限（可由環境變數收緊）
  3. 每次送出前向共用的 upstream 配額取得額度
  4. 隔離 httpx 依賴
"""

from __future__ import annotations

import os
import time
from typing import Any, Optional

import httpx

from roadtrip.infrastructure.rate_limiter import RateLimiter, acquire, get_upstream_limiter
from roadtrip.security.key_manager import get_key_manager
from roadtrip.shared.exceptions import UpstreamError, UpstreamTimeoutError


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, "") or default)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, "") or default)
    except ValueError:
        return default


class SecureHttpClient:
    """Wraps httpx GET with scrubbed errors, capped timeout/retries and quota."""

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        max_retries: int = 1,
        tool_name: str = "http",
        quota_key: Optional[str] = None,
        limiter: Optional[RateLimiter] = None,
    ):
        requested = timeout if timeout is not None else _env_float("TOOL_HTTP_TIMEOUT_SECONDS", 8.0)
        cap = _env_float("TOOL_HTTP_TIMEOUT_CAP_SECONDS", 10.0)
        floor = _env_float("TOOL_HTTP_TIMEOUT_FLOOR_SECONDS", 1.0)
        self._timeout = float(min(cap, max(floor, requested)))
        self._max_retries = max(0, min(_env_int("TOOL_HTTP_RETRY_CAP", 2), int(max_retries)))
        self._tool_name = tool_name
        self._quota_key = quota_key or tool_name
        self._limiter = limiter
        self._km = get_key_manager()

    @property
    def timeout(self) -> float:
        return self._timeout

    def _acquire_quota(self) -> None:
        limiter = self._limiter or get_upstream_limiter()
        acquire(limiter, self._quota_key, max_wait_seconds=self._timeout)

    def get(
        self,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """GET ``url`` and return the decoded JSON body."""
        last_error: Optional[Exception] = None

        for attempt in range(1, self._max_retries + 2):
            self._acquire_quota()
            try:
                resp = httpx.get(url, params=params, headers=headers, timeout=self._timeout)
                resp.raise_for_status()
                return resp.json()
            except httpx.HTTPStatusError as e:
                safe_msg = self._km.scrub_text(str(e))
                last_error = UpstreamError(self._tool_name, f"HTTP {e.response.status_code}: {safe_msg}")
                if e.response.status_code < 500 and e.response.status_code != 429:
                    raise last_error from None
            except httpx.TimeoutException:
                last_error = UpstreamTimeoutError(
                    self._tool_name, f"request timed out after {self._timeout}s (attempt {attempt})"
                )
            except httpx.HTTPError as e:
                safe_msg = self._km.scrub_text(str(e))
                last_error = UpstreamError(self._tool_name, f"network error: {safe_msg}")
            except ValueError as e:
                safe_msg = self._km.scrub_text(str(e))
                raise UpstreamError(self._tool_name, f"invalid JSON body: {safe_msg}") from None

            if attempt <= self._max_retries:
                time.sleep(0.5 * attempt)

        raise last_error  # type: ignore[misc]
