"""
Module 03 - Multiformats
File: cid.py

Content identifiers (CIDs).

Binary layout:
- CIDv0: a bare sha2-256 multihash (0x12 0x20 <32 bytes>), implicitly dag-pb
- CIDv1: <varint version=1><varint codec><multihash>

Text form:
- CIDv0: base58btc without multibase prefix ("Qm...")
- CIDv1: multibase, base32 lower case by default ("bafy...")
"""

from __future__ import annotations

from dataclasses import dataclass

from core.crypto.hashing import SHA2_256

from .errors import CidDecodeError, MultiformatError
from .multibase import b58decode, b58encode, base32_encode, multibase_decode
from .multihash import Multihash
from .varint import decode_varint, encode_varint

# Multicodec codes
DAG_PB = 0x70
RAW = 0x55
DAG_CBOR = 0x71


@dataclass(frozen=True)
class CID:
    """A decoded content identifier. Equality compares the binary form."""

    version: int
    codec: int
    multihash: Multihash

    @classmethod
    def decode(cls, text: str) -> "CID":
        """
        Parse the text form of a CID.

        Raises:
            CidDecodeError: If the text is not a valid CID
        """
        text = text.strip()
        try:
            if len(text) == 46 and text.startswith("Qm"):
                raw = b58decode(text)
            else:
                raw = multibase_decode(text)
            cid, end = cls.from_bytes(raw)
        except CidDecodeError:
            raise
        except MultiformatError as e:
            raise CidDecodeError(f"Cannot parse CID {text!r}: {e}") from e
        if end != len(raw):
            raise CidDecodeError(f"Cannot parse CID {text!r}: trailing bytes")
        return cid

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> tuple["CID", int]:
        """
        Decode a binary CID starting at `offset`.

        Returns:
            (cid, offset just past the CID)
        """
        if len(data) - offset >= 2 and data[offset] == SHA2_256 and data[offset + 1] == 0x20:
            mh, end = Multihash.decode(data, offset)
            return cls(version=0, codec=DAG_PB, multihash=mh), end

        version, pos = decode_varint(data, offset)
        if version != 1:
            raise CidDecodeError(f"Unsupported CID version {version}")
        codec, pos = decode_varint(data, pos)
        mh, end = Multihash.decode(data, pos)
        return cls(version=1, codec=codec, multihash=mh), end

    def to_bytes(self) -> bytes:
        if self.version == 0:
            return self.multihash.encode()
        return encode_varint(1) + encode_varint(self.codec) + self.multihash.encode()

    def __str__(self) -> str:
        if self.version == 0:
            return b58encode(self.to_bytes())
        return base32_encode(self.to_bytes())
