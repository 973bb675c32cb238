"""Coercion of loosely typed JSON-RPC parameters."""

from __future__ import annotations

import binascii
import math
import re

_UINT64_MASK = (1 << 64) - 1
_INT64_SIGN = 1 << 63
_LEADING_DECIMAL = re.compile(r"[ \t\r\n]*([0-9]+)")


def parse_hash(param: object) -> bytes:
    """Decode a 32-byte hash from a hex string; raise ValueError otherwise."""
    if not isinstance(param, str):
        raise ValueError(f"expected string, got {type(param).__name__}")
    try:
        raw = binascii.unhexlify(param)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid hex: {exc}") from exc
    if len(raw) != 32:
        raise ValueError(f"expected 32-byte hash, got {len(raw)} bytes")
    return raw


def to_uint64(value: object) -> int:
    """Convert a number or decimal string to an unsigned 64-bit integer.

    Numbers are truncated and wrapped to 64 bits; strings are read from their
    leading decimal digits. Raise ValueError for anything else.
    """
    if isinstance(value, bool):
        raise ValueError("cannot convert bool to uint64")
    if isinstance(value, int):
        return value & _UINT64_MASK
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"cannot convert {value} to uint64")
        return int(value) & _UINT64_MASK
    if isinstance(value, str):
        match = _LEADING_DECIMAL.match(value)
        if match is None:
            raise ValueError(f"expected integer, got {value!r}")
        number = int(match.group(1))
        if number > _UINT64_MASK:
            raise ValueError("unsigned integer overflow")
        return number
    raise ValueError(f"cannot convert {type(value).__name__} to uint64")


def to_int(value: object) -> int:
    """Like to_uint64, but reinterpreted as a signed 64-bit integer."""
    number = to_uint64(value)
    return number - (1 << 64) if number & _INT64_SIGN else number


def to_bool(value: object) -> bool:
    """Convert a bool or number to bool; raise ValueError otherwise."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    raise ValueError(f"cannot convert {type(value).__name__} to bool")