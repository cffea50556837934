"""FastAPI 主應用：公路旅行規劃 API

啟動: uvicorn roadtrip.api.main:app --port 8000
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Any, Callable, Optional

import redis
from dotenv import load_dotenv
from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from roadtrip.adapters import tool_factory
from roadtrip.adapters.weather.openweather import build_query
from roadtrip.api.schemas import (
    DiagnosticsResponse,
    ErrorResponse,
    HealthResponse,
    NearbyItem,
    NearbyLocation,
    NearbyResponse,
)
from roadtrip.application.context import PlanContext, make_plan_context
from roadtrip.application.contracts import PlanRequest, parse_plan_request
from roadtrip.application.plan_trip import PlanTools, resolve_plan_tools, run_plan_with_timeout
from roadtrip.config.settings import load_engine_settings, resolve_provider_snapshot
from roadtrip.domain.models import PlanResult
from roadtrip.infrastructure.rate_limiter import RateLimiter, get_rate_limiter
from roadtrip.planner.scoring import score_place
from roadtrip.security.key_manager import get_key_manager
from roadtrip.services.weather_advice import annotate_current, annotate_forecast
from roadtrip.shared.exceptions import PlanCancelledError, PlannerError, UpstreamError, ValidationError
from roadtrip.tools.interfaces import NearbySearchInput, NearbySearchTool, PlaceDetails, PlaceDetailsTool, WeatherTool

_api_logger = logging.getLogger("roadtrip.api")

load_dotenv()  # 自動載入 .env

NEARBY_PAUSE_SECONDS = 0.12
DISCONNECT_POLL_SECONDS = 0.25
RETRY_AFTER_SECONDS = 5
_UNLIMITED_PATHS = {"/health"}

app = FastAPI(
    title="roadtrip-planner",
    version="0.1.0",
    docs_url="/docs" if os.getenv("ENABLE_DOCS", "false").lower() == "true" else None,
    redoc_url=None,
)


# ── 中介層 ────────────────────────────────────────

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """注入安全回應標頭"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response


def _client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """每個用戶端 IP 的請求頻率限制（記憶體或 Redis）"""

    def __init__(self, app, max_requests: int = 60, window_seconds: int = 60, limiter: Optional[RateLimiter] = None):
        super().__init__(app)
        self._max = max_requests
        self._window = window_seconds
        self._limiter = limiter or get_rate_limiter(max_requests, window_seconds, prefix="roadtrip:ratelimit:api:")

    async def dispatch(self, request: Request, call_next):
        if request.url.path in _UNLIMITED_PATHS:
            return await call_next(request)
        try:
            allowed = self._limiter.allow(_client_key(request))
        except redis.RedisError as exc:
            # Redis 異常時放行，不把整站鎖死
            _api_logger.warning("rate limiter unavailable: %s", get_key_manager().scrub_text(str(exc)))
            allowed = True
        if not allowed:
            return JSONResponse(
                status_code=429,
                content={"error": "rate_limited", "detail": "請求過於頻繁，請稍後再試"},
                headers={
                    "X-RateLimit-Limit": str(self._max),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(int(time.time()) + self._window),
                    "Retry-After": str(self._window),
                },
            )
        return await call_next(request)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    RateLimitMiddleware,
    max_requests=int(os.getenv("RATE_LIMIT_MAX", "60")),
    window_seconds=int(os.getenv("RATE_LIMIT_WINDOW", "60")),
)

# CORS：正式環境應限制 origins
_cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# ── 錯誤處理 ────────────────────────────────────────

@app.exception_handler(PlannerError)
async def planner_error_handler(request: Request, exc: PlannerError):
    if exc.status_code >= 500:
        _safe_log_exception(f"{request.url.path} failed", exc)
    headers = {"Retry-After": str(RETRY_AFTER_SECONDS)} if exc.retryable else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{where}: {first.get('msg', 'invalid')}" if where else str(first.get("msg", "invalid"))
    else:
        detail = "invalid request"
    return JSONResponse(status_code=400, content={"error": ValidationError.kind, "detail": detail})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    _safe_log_exception(f"{request.url.path} crashed", exc)
    return JSONResponse(
        status_code=500,
        content={"error": "server_error", "detail": get_key_manager().scrub_text(str(exc)) or "Unknown error"},
    )


def get_plan_tools_factory() -> Callable[[], PlanTools]:
    return resolve_plan_tools


_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


# ── 路由 ────────────────────────────────────────

@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


@app.get("/diagnostics", response_model=DiagnosticsResponse)
def diagnostics():
    """內部診斷：工具選擇與限流後端（正式環境應加驗證）"""
    return DiagnosticsResponse(
        tools=tool_factory.describe_active_tools(),
        providers=resolve_provider_snapshot().model_dump(),
        rate_limit={
            "max": int(os.getenv("RATE_LIMIT_MAX", "60")),
            "window_seconds": int(os.getenv("RATE_LIMIT_WINDOW", "60")),
            "backend": ("redis" if os.getenv("RATE_LIMIT_REDIS_URL") or os.getenv("REDIS_URL") else "memory"),
        },
    )


async def _plan_until_disconnect(
    request: Request,
    plan_request: PlanRequest,
    tools: PlanTools,
    ctx: PlanContext,
) -> PlanResult:
    """Run the plan in the threadpool; cancel it as soon as the client goes away."""
    task = asyncio.ensure_future(run_in_threadpool(run_plan_with_timeout, plan_request, tools=tools, ctx=ctx))
    try:
        while True:
            done, _pending = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                ctx.cancel()
                ctx.logger.warning("plan", "client disconnected, request cancelled")
                raise PlanCancelledError("client disconnected")
    finally:
        if not task.done():
            # worker 在下一次外部呼叫前停下
            ctx.cancel()


@app.post("/plan", response_model=PlanResult, responses=_ERROR_RESPONSES)
async def plan(
    request: Request,
    payload: Any = Body(..., examples=[{"origin": "台北車站", "destination": "墾丁", "days": 5}]),
    tools_factory: Callable[[], PlanTools] = Depends(get_plan_tools_factory),
):
    """一次規劃：沿路線採集景點並排出每日行程"""
    plan_request = parse_plan_request(payload)
    tools = tools_factory()
    ctx = make_plan_context(load_engine_settings())
    return await _plan_until_disconnect(request, plan_request, tools, ctx)


def _parse_location(raw: Optional[str]) -> tuple[float, float]:
    if not raw:
        raise ValidationError("location is required, e.g. 25.0478,121.5170")
    parts = raw.split(",")
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except (IndexError, ValueError):
        raise ValidationError("invalid location") from None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise ValidationError("invalid location")
    return lat, lng


@app.get("/places/nearby", response_model=NearbyResponse, responses=_ERROR_RESPONSES)
def places_nearby(
    location: Optional[str] = Query(default=None, description="lat,lng"),
    radius: Optional[float] = Query(default=None, description="meters"),
    types: list[str] = Query(default=[], alias="type"),
    keyword: str = Query(default=""),
    places: NearbySearchTool = Depends(tool_factory.get_places_tool),
):
    """Nearby search for one or more place types, merged by place id."""
    lat, lng = _parse_location(location)
    if radius is None:
        raise ValidationError("radius is required")
    if radius <= 0:
        raise ValidationError("invalid radius")
    if not types:
        raise ValidationError("at least one type is required")

    best: dict[str, tuple[float, NearbyItem]] = {}
    for index, place_type in enumerate(types):
        if index:
            time.sleep(NEARBY_PAUSE_SECONDS)
        try:
            results = places.search_nearby(
                NearbySearchInput(
                    lat=lat,
                    lng=lng,
                    radius_m=round(radius),
                    place_type=place_type,
                    keyword=keyword or None,
                )
            )
        except UpstreamError as exc:
            # 單一 type 失敗不中斷整體
            _api_logger.warning("nearby search failed for %s: %s", place_type, exc.detail)
            continue
        for place in results:
            if not place.place_id:
                continue
            score = score_place(place.rating, place.user_ratings_total)
            current = best.get(place.place_id)
            if current is not None and score <= current[0]:
                continue
            best[place.place_id] = (
                score,
                NearbyItem(
                    name=place.name,
                    vicinity=place.vicinity,
                    place_id=place.place_id,
                    rating=place.rating,
                    user_ratings_total=place.user_ratings_total,
                    type=place_type,
                    location=NearbyLocation(lat=place.lat, lng=place.lng) if place.has_location else None,
                ),
            )

    items = [item for _score, item in sorted(best.values(), key=lambda pair: pair[0], reverse=True)]
    return NearbyResponse(count=len(items), items=items)


@app.get("/places/details", response_model=PlaceDetails, responses=_ERROR_RESPONSES)
def places_details(
    place_id: Optional[str] = Query(default=None),
    places: PlaceDetailsTool = Depends(tool_factory.get_places_tool),
):
    if not place_id or not place_id.strip():
        raise ValidationError("place_id is required")
    return places.get_place_details(place_id.strip())


@app.get("/weather", responses=_ERROR_RESPONSES)
def weather(
    q: Optional[str] = Query(default=None),
    lat: Optional[float] = Query(default=None),
    lon: Optional[float] = Query(default=None),
    units: str = Query(default="metric"),
    lang: str = Query(default="zh_tw"),
    tool: WeatherTool = Depends(tool_factory.get_weather_tool),
):
    """目前天氣，附穿搭建議 ``outfit_advice``"""
    query = build_query(q, lat, lon, units, lang)
    return annotate_current(tool.current(query))


@app.get("/forecast", responses=_ERROR_RESPONSES)
def forecast(
    q: Optional[str] = Query(default=None),
    lat: Optional[float] = Query(default=None),
    lon: Optional[float] = Query(default=None),
    units: str = Query(default="metric"),
    lang: str = Query(default="zh_tw"),
    tool: WeatherTool = Depends(tool_factory.get_weather_tool),
):
    """5 日預報，每筆附 ``tripi.outfit_advice``"""
    query = build_query(q, lat, lon, units, lang)
    return annotate_forecast(tool.forecast(query))


def _safe_log_exception(context: str, exc: Exception) -> None:
    """脫敏後記錄例外"""
    _api_logger.error("%s: %s", context, get_key_manager().scrub_text(str(exc)))
