"""pytest 全域 fixtures：測試環境隔離"""

import pytest


@pytest.fixture(autouse=True)
def no_real_apis(monkeypatch):
    """預設停用真實 API（Google / OpenWeather），確保測試不依賴外部服務"""
    monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)
    monkeypatch.delenv("OPENWEATHER_API_KEY", raising=False)
    monkeypatch.delenv("STRICT_EXTERNAL_DATA", raising=False)
    monkeypatch.delenv("TOOL_ALLOWLIST", raising=False)
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("RATE_LIMIT_REDIS_URL", raising=False)
    monkeypatch.delenv("HARVEST_WORKERS", raising=False)
    monkeypatch.delenv("MAPS_LANGUAGE", raising=False)
    monkeypatch.delenv("MAPS_REGION", raising=False)
    # 重置 key 快取與共用限流器，確保每個測試獨立
    from roadtrip.infrastructure.rate_limiter import reset_upstream_limiter
    from roadtrip.security.key_manager import get_key_manager

    km = get_key_manager()
    for key_name in ("GOOGLE_MAPS_API_KEY", "OPENWEATHER_API_KEY"):
        km.reload(key_name)

    reset_upstream_limiter()
    yield
    reset_upstream_limiter()
