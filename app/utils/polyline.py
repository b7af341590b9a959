# path: route-playback-api/app/utils/polyline.py
"""
Encoded polyline codec (signed varint deltas, precision 1e5).

Coordinates are (lat, lon) pairs in both directions, matching the wire order;
reordering into (lon, lat) happens in the route normalizer.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from app.core.errors import DecodeError


PRECISION = 1e5

_MIN_CHAR = 63   # '?'
_MAX_CHAR = 126  # '~'


def _decode_value(encoded: str, index: int) -> Tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise DecodeError(f"Truncated value at offset {index}")
        code = ord(encoded[index])
        if not (_MIN_CHAR <= code <= _MAX_CHAR):
            raise DecodeError(f"Invalid character {encoded[index]!r} at offset {index}")
        b = code - _MIN_CHAR
        index += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    value = ~(result >> 1) if (result & 1) else (result >> 1)
    return value, index


def decode(encoded: str) -> List[Tuple[float, float]]:
    """
    Decode a polyline string into (lat, lon) pairs in decode order.

    Raises DecodeError for a truncated value, a latitude without a matching
    longitude, a character outside the polyline alphabet, or a cumulative
    coordinate outside the valid lat/lon range.
    """
    coords = []
    index = 0
    lat = 0
    lon = 0

    while index < len(encoded):
        dlat, index = _decode_value(encoded, index)
        if index >= len(encoded):
            raise DecodeError(f"Missing longitude for point {len(coords)}")
        dlon, index = _decode_value(encoded, index)

        lat += dlat
        lon += dlon
        point_lat = lat / PRECISION
        point_lon = lon / PRECISION
        if not (-90.0 <= point_lat <= 90.0):
            raise DecodeError(f"lat out of range [-90,90] at point {len(coords)}: {point_lat}")
        if not (-180.0 <= point_lon <= 180.0):
            raise DecodeError(f"lon out of range [-180,180] at point {len(coords)}: {point_lon}")
        coords.append((point_lat, point_lon))

    return coords


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else (value << 1)
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + _MIN_CHAR))
        value >>= 5
    chunks.append(chr(value + _MIN_CHAR))
    return "".join(chunks)


def encode(coords: Sequence[Tuple[float, float]]) -> str:
    """Encode (lat, lon) pairs; inverse of decode."""
    out = []
    prev_lat = 0
    prev_lon = 0
    for lat, lon in coords:
        lat_i = int(round(lat * PRECISION))
        lon_i = int(round(lon * PRECISION))
        out.append(_encode_value(lat_i - prev_lat))
        out.append(_encode_value(lon_i - prev_lon))
        prev_lat, prev_lon = lat_i, lon_i
    return "".join(out)
