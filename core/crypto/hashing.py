"""
Module 02 - Hashing Utilities
Hash functions used for sampling keys, block verification and checksums.

This module provides:
- SHA-256 hashing for raw bytes and text
- 256-bit integer keys for the task sampler
- The table of multihash functions supported for block verification
- The multihash-prefixed checksum recorded for fetched archives

Security/Determinism Notes:
- Always hash raw bytes exactly as received
- Text is encoded as UTF-8 before hashing
- All operations are deterministic
"""
from __future__ import annotations

import hashlib
from typing import Callable


# Multihash function codes
# https://github.com/multiformats/multicodec/blob/master/table.csv
IDENTITY = 0x00
SHA2_256 = 0x12
SHA2_512 = 0x13
SHA3_256 = 0x16
BLAKE2B_256 = 0xB220


class UnsupportedHashError(ValueError):
    """Raised when a multihash names a hash function we cannot compute."""

    def __init__(self, code: int) -> None:
        super().__init__(f"Unsupported hash function 0x{code:x}")
        self.code = code


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_text_to_int(text: str) -> int:
    """
    Hash UTF-8 text with SHA-256 and read the digest as a big-endian
    unsigned 256-bit integer.

    Example:
        >>> hash_text_to_int("") == int(hashlib.sha256(b"").hexdigest(), 16)
        True
    """
    return int.from_bytes(sha256(text.encode("utf-8")), "big")


def _blake2b_256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


HASH_FUNCTIONS: dict[int, Callable[[bytes], bytes]] = {
    IDENTITY: lambda data: bytes(data),
    SHA2_256: sha256,
    SHA2_512: lambda data: hashlib.sha512(data).digest(),
    SHA3_256: lambda data: hashlib.sha3_256(data).digest(),
    BLAKE2B_256: _blake2b_256,
}


def multihash_digest(code: int, data: bytes) -> bytes:
    """
    Compute the digest of `data` using the hash function named by a
    multihash code.

    Raises:
        UnsupportedHashError: If the code is not in HASH_FUNCTIONS
    """
    fn = HASH_FUNCTIONS.get(code)
    if fn is None:
        raise UnsupportedHashError(code)
    return fn(data)


def car_checksum(data: bytes) -> str:
    """
    Checksum recorded for a fetched archive: the hex-encoded sha2-256
    multihash of the whole byte stream.

    The `1220` prefix is the multihash header: 0x12 is the code of sha2-256
    and 0x20 the digest length (32 bytes).
    """
    return "1220" + sha256(data).hex()


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with or without 0x prefix) to bytes.

    Raises:
        ValueError: If the string has odd length or contains invalid
                   hex characters
    """
    hex_content = hex_string[2:] if hex_string.startswith(("0x", "0X")) else hex_string

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length, got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "IDENTITY",
    "SHA2_256",
    "SHA2_512",
    "SHA3_256",
    "BLAKE2B_256",
    "HASH_FUNCTIONS",
    "UnsupportedHashError",
    "sha256",
    "hash_text_to_int",
    "multihash_digest",
    "car_checksum",
    "to_hex",
    "from_hex",
]
