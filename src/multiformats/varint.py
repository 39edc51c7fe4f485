"""
Unsigned varint, the wire encoding for every tag and length prefix.

Little-endian base-128: seven payload bits per byte, the high bit set on
every byte except the last. Values are limited to 128 bits, which needs at
most 19 bytes.
"""

from __future__ import annotations
from typing import Tuple

from .errors import DecodeError, Invalid

MAX_BITS = 128
MAX_VALUE = (1 << MAX_BITS) - 1
MAX_LEN = 19  # ceil(128 / 7)


def encode(value: int) -> bytes:
    """Encode a non-negative integer below 2**128."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise Invalid(f"varint value must be int, got {type(value).__name__}")
    if value < 0 or value > MAX_VALUE:
        raise Invalid(f"varint value {value} outside 128-bit range")

    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode(buf: bytes) -> Tuple[int, bytes]:
    """
    Read one varint prefix from `buf`.

    Returns (value, remaining). Rejects empty input, a missing terminator,
    overlong and non-minimal encodings.
    """
    value = 0
    shift = 0
    for i, byte in enumerate(buf):
        if i >= MAX_LEN:
            break
        value |= (byte & 0x7F) << shift
        if byte & 0x80 == 0:
            if byte == 0 and i > 0:
                raise DecodeError("varint not minimal", stage="binary")
            if value > MAX_VALUE:
                raise DecodeError("varint overflows 128 bits", stage="binary")
            return value, bytes(buf[i + 1:])
        shift += 7

    if not buf:
        raise DecodeError("varint from empty buffer", stage="binary")
    if len(buf) >= MAX_LEN:
        raise DecodeError(f"varint longer than {MAX_LEN} bytes", stage="binary")
    raise DecodeError("varint truncated", stage="binary")


def read_prefixed(buf: bytes, what: str) -> Tuple[bytes, bytes]:
    """Read a varint length followed by exactly that many bytes."""
    n, rest = decode(buf)
    if n > len(rest):
        raise DecodeError(
            f"insufficient bytes, need {n} have {len(rest)}",
            protocol=what, stage="binary",
        )
    return rest[:n], rest[n:]


def write_prefixed(data: bytes) -> bytes:
    """Varint length prefix followed by `data`."""
    return encode(len(data)) + data
