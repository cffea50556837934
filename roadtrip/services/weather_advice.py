"""穿搭建議：依體感溫度、風速與降水給出一句中文提示"""

from __future__ import annotations

import math
from typing import Any, Optional

# (下限溫度, 建議)；由熱到冷，第一個符合者勝出
_TEMPERATURE_BANDS: tuple[tuple[float, str], ...] = (
    (33, "酷熱，清爽短袖/排汗材質，防曬補水"),
    (30, "很熱，透氣短袖，避免長時間曝曬"),
    (25, "偏熱，短袖為主，通風透氣"),
    (20, "舒適，短袖或薄長袖皆宜"),
    (15, "微涼，建議薄外套/薄針織"),
    (10, "偏涼，長袖+外套"),
    (5, "寒冷，保暖外套/內搭"),
)
_FREEZING = "嚴寒，厚外套、帽子手套圍巾"
WINDY_MPS = 8.0


def _finite(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def outfit_advice(
    temp: Any,
    feels: Any = None,
    wind: Any = None,
    rain: Any = None,
    snow: Any = None,
) -> str:
    t = _finite(feels)
    if t is None:
        t = _finite(temp)
    parts: list[str] = []

    if t is None:
        parts.append(_FREEZING)
    else:
        parts.append(next((text for floor, text in _TEMPERATURE_BANDS if t >= floor), _FREEZING))

    if (_finite(wind) or 0.0) >= WINDY_MPS:
        parts.append("風大，使用防風外套")
    if (_finite(rain) or 0.0) > 0 or (_finite(snow) or 0.0) > 0:
        parts.append("可能降水，攜帶摺疊傘/防水外層")
    return "；".join(parts) + "。"


def _precip(block: Any) -> Any:
    if not isinstance(block, dict):
        return None
    return block.get("1h", block.get("3h"))


def advice_for(entry: dict[str, Any]) -> str:
    """Outfit advice for one OpenWeather current-weather or forecast entry."""
    main = entry.get("main") or {}
    return outfit_advice(
        temp=main.get("temp"),
        feels=main.get("feels_like", main.get("feels")),
        wind=(entry.get("wind") or {}).get("speed"),
        rain=_precip(entry.get("rain")),
        snow=_precip(entry.get("snow")),
    )


def annotate_current(data: dict[str, Any]) -> dict[str, Any]:
    return {**data, "outfit_advice": advice_for(data)}


def annotate_forecast(data: dict[str, Any]) -> dict[str, Any]:
    entries = data.get("list")
    annotated = []
    if isinstance(entries, list):
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            tripi = {**(entry.get("tripi") or {}), "outfit_advice": advice_for(entry)}
            annotated.append({**entry, "tripi": tripi})
    return {**data, "list": annotated}
