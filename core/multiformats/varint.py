"""
Module 03 - Multiformats
File: varint.py

Unsigned LEB128 varints as used by multiformats and CAR framing.
"""

from __future__ import annotations

from .errors import MultiformatError

# Multiformats caps varints at 9 bytes (63 bits of payload)
MAX_VARINT_BYTES = 9


class VarintError(MultiformatError):
    """Raised when a varint is truncated, overlong or not minimal."""


def encode_varint(value: int) -> bytes:
    """
    Encode a non-negative integer as an unsigned varint.

    Example:
        >>> encode_varint(300).hex()
        'ac02'
    """
    if value < 0:
        raise VarintError(f"Cannot encode negative varint: {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """
    Decode an unsigned varint starting at `offset`.

    Returns:
        (value, offset just past the varint)

    Raises:
        VarintError: If the input ends mid-varint, the varint is longer
                     than 9 bytes, or it is not minimally encoded
    """
    value = 0
    shift = 0
    for i in range(MAX_VARINT_BYTES):
        pos = offset + i
        if pos >= len(data):
            raise VarintError("Unexpected end of data while reading varint")
        byte = data[pos]
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            if byte == 0 and i > 0:
                raise VarintError("Varint is not minimally encoded")
            return value, pos + 1
        shift += 7
    raise VarintError(f"Varint is longer than {MAX_VARINT_BYTES} bytes")
