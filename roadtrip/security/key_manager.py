"""集中式 API Key 管理器

所有外部 API 的 Key 都經由此模組讀取並快取，
同時提供日誌與例外訊息用的脫敏方法。禁止在 adapter 內直接 os.getenv。
"""

from __future__ import annotations

import os
import time
from typing import Optional

from roadtrip.security.redact import redact_sensitive
from roadtrip.shared.exceptions import KeyMissingError

GOOGLE_MAPS_KEY = "GOOGLE_MAPS_API_KEY"
OPENWEATHER_KEY = "OPENWEATHER_API_KEY"


class _KeyEntry:
    __slots__ = ("value", "loaded_at", "source")

    def __init__(self, value: str, source: str):
        self.value = value
        self.loaded_at = time.time()
        self.source = source


class KeyManager:
    """Process-wide key cache with scrubbing helpers."""

    def __init__(self):
        self._keys: dict[str, _KeyEntry] = {}

    def get(self, name: str, *, required: bool = False) -> Optional[str]:
        entry = self._keys.get(name)
        if entry is None:
            raw = os.getenv(name, "").strip()
            if raw:
                entry = _KeyEntry(value=raw, source="env")
                self._keys[name] = entry
            elif required:
                raise KeyMissingError(name)
            else:
                return None
        return entry.value

    def get_google_key(self, *, required: bool = True) -> str:
        return self.get(GOOGLE_MAPS_KEY, required=required) or ""

    def get_openweather_key(self, *, required: bool = True) -> str:
        return self.get(OPENWEATHER_KEY, required=required) or ""

    def has_key(self, name: str) -> bool:
        if name in self._keys:
            return True
        return bool(os.getenv(name, "").strip())

    @staticmethod
    def redact(value: str) -> str:
        """Keep the first and last 4 characters only."""
        if not value or len(value) <= 8:
            return "****"
        return value[:4] + "****" + value[-4:]

    def scrub_text(self, text: str) -> str:
        """Remove every known key value from free text."""
        result = str(text) if text is not None else ""
        for name, entry in self._keys.items():
            if entry.value and entry.value in result:
                result = result.replace(entry.value, f"[{name}:***REDACTED***]")
        return redact_sensitive(result)

    def reload(self, name: str) -> None:
        """Re-read one key from the environment (rotation, tests)."""
        raw = os.getenv(name, "").strip()
        if raw:
            self._keys[name] = _KeyEntry(value=raw, source="env")
        else:
            self._keys.pop(name, None)


_manager: Optional[KeyManager] = None


def get_key_manager() -> KeyManager:
    global _manager
    if _manager is None:
        _manager = KeyManager()
    return _manager
