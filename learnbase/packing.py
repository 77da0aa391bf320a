"""Conversion between Python numbers and their 8-byte little-endian storage form."""

from __future__ import annotations

import struct

_U64 = struct.Struct("<Q")
_F64 = struct.Struct("<d")

_U64_MAX = (1 << 64) - 1


def pack_u64(value: int) -> bytes:
    """Return the 8-byte little-endian representation of an unsigned 64-bit integer."""
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"value {value} does not fit in an unsigned 64-bit integer")
    return _U64.pack(value)


def unpack_u64(data: bytes) -> int:
    """Read an unsigned 64-bit integer from the first 8 bytes of ``data``."""
    if len(data) < _U64.size:
        raise ValueError(f"need at least {_U64.size} bytes, got {len(data)}")
    return _U64.unpack_from(data)[0]


def pack_float(value: float) -> bytes:
    """Return the 8-byte little-endian IEEE 754 representation of ``value``."""
    return _F64.pack(value)


def unpack_float(data: bytes) -> float:
    """Read a double-precision float from the first 8 bytes of ``data``."""
    if len(data) < _F64.size:
        raise ValueError(f"need at least {_F64.size} bytes, got {len(data)}")
    return _F64.unpack_from(data)[0]