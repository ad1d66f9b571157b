"""Encoded polyline codec - converts Google's compressed path strings to coordinates.

Each value is a signed delta from the previous point, scaled by 1e5,
zig-zag encoded and split into 5-bit chunks (least significant first).
Every chunk except the last has bit 0x20 set, and each chunk is offset
by 63 to land in printable ASCII. Latitude and longitude alternate.
"""

from typing import Iterable, List, Tuple

from errors import HyperlapseError

PRECISION = 1e5
CHUNK_BITS = 5
CHUNK_MASK = 0x1F
CONTINUATION_BIT = 0x20
ASCII_OFFSET = 63
MAX_LAT_E5 = 90 * 100000
MAX_LNG_E5 = 180 * 100000


class DecodeError(HyperlapseError, ValueError):
    """Raised when an encoded polyline is malformed."""


def _read_value(encoded: str, pos: int) -> Tuple[int, int]:
    """
    Read one variable-length signed integer starting at pos.

    Returns:
        Tuple of (decoded integer, position after the last chunk)

    Raises:
        DecodeError: If the input ends before the final chunk
    """
    result = 0
    shift = 0
    while True:
        if pos >= len(encoded):
            raise DecodeError(f"Unterminated value at offset {pos} (input length {len(encoded)})")

        chunk = ord(encoded[pos]) - ASCII_OFFSET
        if chunk < 0 or chunk > 0x3F:
            raise DecodeError(f"Invalid character {encoded[pos]!r} at offset {pos}")
        pos += 1

        result |= (chunk & CHUNK_MASK) << shift
        shift += CHUNK_BITS
        if not chunk & CONTINUATION_BIT:
            break

    # Zig-zag: low bit carries the sign
    if result & 1:
        return ~(result >> 1), pos
    return result >> 1, pos


def decode(encoded: str) -> List[Tuple[float, float]]:
    """
    Decode an encoded polyline into (lat, lng) pairs.

    Args:
        encoded: Encoded polyline string

    Returns:
        List of (latitude, longitude) tuples in path order

    Raises:
        DecodeError: If the string is truncated or contains invalid characters
    """
    coordinates = []
    lat = lng = 0
    pos = 0

    while pos < len(encoded):
        delta_lat, pos = _read_value(encoded, pos)
        if pos >= len(encoded):
            raise DecodeError("Input ended after a latitude with no longitude")
        delta_lng, pos = _read_value(encoded, pos)

        lat += delta_lat
        lng += delta_lng
        if abs(lat) > MAX_LAT_E5 or abs(lng) > MAX_LNG_E5:
            raise DecodeError(f"Point {len(coordinates)} out of range: {lat / PRECISION}, {lng / PRECISION}")
        coordinates.append((lat / PRECISION, lng / PRECISION))

    return coordinates


def _write_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= CONTINUATION_BIT:
        chunks.append(chr((CONTINUATION_BIT | (value & CHUNK_MASK)) + ASCII_OFFSET))
        value >>= CHUNK_BITS
    chunks.append(chr(value + ASCII_OFFSET))
    return "".join(chunks)


def encode(coordinates: Iterable[Tuple[float, float]]) -> str:
    """Encode (lat, lng) pairs into a polyline string (inverse of decode)."""
    parts = []
    prev_lat = prev_lng = 0
    for lat, lng in coordinates:
        lat_e5 = int(round(lat * PRECISION))
        lng_e5 = int(round(lng * PRECISION))
        parts.append(_write_value(lat_e5 - prev_lat))
        parts.append(_write_value(lng_e5 - prev_lng))
        prev_lat, prev_lng = lat_e5, lng_e5
    return "".join(parts)
