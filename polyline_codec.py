# Encodes and decodes the compact polyline format used by the directions API.
#
# Every coordinate is scaled by 1e5, delta-encoded against the previous point,
# zig-zag mapped to an unsigned value and written as 5-bit groups (low bits
# first), each group offset by 63. Bit 0x20 marks that another group follows.

PRECISION = 100000
CHAR_OFFSET = 63
CONTINUATION_BIT = 0x20
CHUNK_MASK = 0x1f


class MalformedPolylineError(ValueError):
    """Raised when an encoded polyline ends in the middle of a value."""


def _read_value(encoded: str, index: int) -> tuple[int, int]:
    """Reads one zig-zag value starting at index. Returns (value, next index)."""
    shift, result = 0, 0
    while True:
        if index >= len(encoded):
            raise MalformedPolylineError(
                f"Polyline ended inside a value at position {index}")
        chunk = ord(encoded[index]) - CHAR_OFFSET
        if chunk < 0:
            raise MalformedPolylineError(
                f"Invalid polyline character {encoded[index]!r} at position {index}")
        index += 1
        result |= (chunk & CHUNK_MASK) << shift
        shift += 5
        if chunk < CONTINUATION_BIT:
            break

    if result & 1:
        return ~(result >> 1), index
    return result >> 1, index


def decode(encoded: str) -> list[tuple[float, float]]:
    """Decode a polyline string into a list of (lat, lng) coordinates."""
    coordinates = []
    index, lat, lng = 0, 0, 0

    while index < len(encoded):
        delta_lat, index = _read_value(encoded, index)
        if index >= len(encoded):
            raise MalformedPolylineError(
                "Polyline has a latitude without a matching longitude")
        delta_lng, index = _read_value(encoded, index)

        lat += delta_lat
        lng += delta_lng
        coordinates.append((lat / PRECISION, lng / PRECISION))

    return coordinates


def _write_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= CONTINUATION_BIT:
        chunks.append(chr((CONTINUATION_BIT | (value & CHUNK_MASK)) + CHAR_OFFSET))
        value >>= 5
    chunks.append(chr(value + CHAR_OFFSET))
    return "".join(chunks)


def encode(coordinates) -> str:
    """Encode a sequence of (lat, lng) pairs into a polyline string."""
    output = []
    prev_lat, prev_lng = 0, 0

    for lat, lng in coordinates:
        scaled_lat = round(lat * PRECISION)
        scaled_lng = round(lng * PRECISION)
        output.append(_write_value(scaled_lat - prev_lat))
        output.append(_write_value(scaled_lng - prev_lng))
        prev_lat, prev_lng = scaled_lat, scaled_lng

    return "".join(output)
