"""Google encoded polyline decoding.

See https://developers.google.com/maps/documentation/utilities/polylinealgorithm
"""

from __future__ import annotations

from roadtrip.domain.models import GeoPoint


def _next_value(encoded: str, index: int) -> tuple[int, int]:
    shift = 0
    value = 0
    while True:
        b = ord(encoded[index]) - 63
        index += 1
        value |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    delta = ~(value >> 1) if (value & 1) else (value >> 1)
    return delta, index


def decode_polyline(encoded: str, precision: int = 5) -> list[GeoPoint]:
    factor = 10 ** precision
    points: list[GeoPoint] = []
    index = 0
    lat = 0
    lng = 0
    while index < len(encoded):
        dlat, index = _next_value(encoded, index)
        dlng, index = _next_value(encoded, index)
        lat += dlat
        lng += dlng
        points.append(GeoPoint(lat=lat / factor, lng=lng / factor))
    return points


def encode_polyline(points: list[GeoPoint], precision: int = 5) -> str:
    factor = 10 ** precision
    encoded: list[str] = []
    prev_lat = 0
    prev_lng = 0
    for point in points:
        lat = round(point.lat * factor)
        lng = round(point.lng * factor)
        for delta in (lat - prev_lat, lng - prev_lng):
            value = ~(delta << 1) if delta < 0 else (delta << 1)
            while value >= 0x20:
                encoded.append(chr((0x20 | (value & 0x1F)) + 63))
                value >>= 5
            encoded.append(chr(value + 63))
        prev_lat = lat
        prev_lng = lng
    return "".join(encoded)
