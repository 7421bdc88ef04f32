"""
Module 03 - Multiformats
File: multibase.py

Multibase text encodings used by content identifiers:
- 'b' / 'B': RFC 4648 base32 without padding (lower/upper case)
- 'z': base58btc
- 'f' / 'F': base16
- 'm' / 'u': base64 / base64url without padding
"""

from __future__ import annotations

import base64
import binascii

from .errors import MultiformatError

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX = {ch: i for i, ch in enumerate(BASE58_ALPHABET)}


class MultibaseError(MultiformatError):
    """Raised for unknown multibase prefixes or malformed payloads."""


def b58encode(data: bytes) -> str:
    """Encode bytes as base58btc (no multibase prefix)."""
    leading_zeros = len(data) - len(data.lstrip(b"\x00"))
    num = int.from_bytes(data, "big")
    chars = []
    while num:
        num, rem = divmod(num, 58)
        chars.append(BASE58_ALPHABET[rem])
    return "1" * leading_zeros + "".join(reversed(chars))


def b58decode(text: str) -> bytes:
    """Decode base58btc text (no multibase prefix)."""
    num = 0
    for ch in text:
        try:
            num = num * 58 + _BASE58_INDEX[ch]
        except KeyError:
            raise MultibaseError(f"Invalid base58btc character {ch!r}") from None
    leading_zeros = len(text) - len(text.lstrip("1"))
    body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * leading_zeros + body


def _b32decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 8)
    try:
        return base64.b32decode(text.upper() + padding)
    except binascii.Error as e:
        raise MultibaseError(f"Invalid base32 payload: {e}") from e


def _b64decode(text: str, urlsafe: bool) -> bytes:
    padding = "=" * (-len(text) % 4)
    try:
        if urlsafe:
            return base64.urlsafe_b64decode(text + padding)
        return base64.b64decode(text + padding, validate=True)
    except binascii.Error as e:
        raise MultibaseError(f"Invalid base64 payload: {e}") from e


def multibase_decode(text: str) -> bytes:
    """
    Decode a multibase-prefixed string.

    Raises:
        MultibaseError: If the prefix is unknown or the payload malformed
    """
    if not text:
        raise MultibaseError("Empty multibase string")
    prefix, payload = text[0], text[1:]
    if prefix in ("b", "B"):
        return _b32decode(payload)
    if prefix == "z":
        return b58decode(payload)
    if prefix in ("f", "F"):
        try:
            return bytes.fromhex(payload)
        except ValueError as e:
            raise MultibaseError(f"Invalid base16 payload: {e}") from e
    if prefix == "m":
        return _b64decode(payload, urlsafe=False)
    if prefix == "u":
        return _b64decode(payload, urlsafe=True)
    raise MultibaseError(f"Unsupported multibase prefix {prefix!r}")


def base32_encode(data: bytes) -> str:
    """Encode bytes as multibase base32 (lower case, 'b' prefix)."""
    return "b" + base64.b32encode(data).decode("ascii").rstrip("=").lower()
