"""
Module 03 - Multiformats
File: multihash.py

Self-describing hash digests: <varint code><varint length><digest>.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.crypto.hashing import multihash_digest

from .errors import MultiformatError
from .varint import decode_varint, encode_varint


@dataclass(frozen=True)
class Multihash:
    """A decoded multihash."""

    code: int
    digest: bytes

    @classmethod
    def decode(cls, data: bytes, offset: int = 0) -> tuple["Multihash", int]:
        """
        Decode a multihash starting at `offset`.

        Returns:
            (multihash, offset just past the digest)
        """
        code, pos = decode_varint(data, offset)
        length, pos = decode_varint(data, pos)
        end = pos + length
        if end > len(data):
            raise MultiformatError(
                f"Multihash digest truncated: need {length} bytes, have {len(data) - pos}"
            )
        return cls(code=code, digest=bytes(data[pos:end])), end

    def encode(self) -> bytes:
        return encode_varint(self.code) + encode_varint(len(self.digest)) + self.digest

    def matches(self, data: bytes) -> bool:
        """
        Recompute the digest of `data` and compare.

        Raises:
            UnsupportedHashError: If the hash function is not supported
        """
        return multihash_digest(self.code, data) == self.digest

    @classmethod
    def of(cls, code: int, data: bytes) -> "Multihash":
        """Hash `data` with the given hash function."""
        return cls(code=code, digest=multihash_digest(code, data))
