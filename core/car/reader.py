"""
Module 04 - Content-Addressed Archives
File: reader.py

Decoder for CARv1 byte streams.

Layout:
    <varint header length><DAG-CBOR header {"roots": [CID...], "version": 1}>
    (<varint section length><binary CID><block bytes>)*

Only the subset of DAG-CBOR that appears in a CAR header is decoded:
unsigned/negative integers, byte and text strings, arrays, maps, the simple
values false/true/null, and tag 42 (CID links). Indefinite-length items are
rejected because DAG-CBOR forbids them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from core.multiformats import CID, MultiformatError, decode_varint

CID_TAG = 42

# Major types
_UINT, _NEGINT, _BYTES, _TEXT, _ARRAY, _MAP, _TAG, _SIMPLE = range(8)

# Header nesting never goes deeper than map -> array -> tag
_MAX_DEPTH = 16


class CarDecodeError(ValueError):
    """Raised when bytes are not a well-formed CARv1 archive."""


@dataclass(frozen=True)
class CarHeader:
    version: int
    roots: tuple[CID, ...]


@dataclass(frozen=True)
class CarBlock:
    cid: CID
    data: bytes


class _CborReader:
    """Cursor over a DAG-CBOR byte string."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def _take(self, n: int) -> bytes:
        end = self.pos + n
        if end > len(self.data):
            raise CarDecodeError("Unexpected end of CBOR data")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def _argument(self, info: int) -> int:
        if info < 24:
            return info
        if info == 24:
            return self._take(1)[0]
        if info == 25:
            return int.from_bytes(self._take(2), "big")
        if info == 26:
            return int.from_bytes(self._take(4), "big")
        if info == 27:
            return int.from_bytes(self._take(8), "big")
        raise CarDecodeError(f"Unsupported CBOR additional info {info}")

    def read(self, depth: int = 0) -> Any:
        if depth > _MAX_DEPTH:
            raise CarDecodeError("CBOR nesting too deep")
        initial = self._take(1)[0]
        major, info = initial >> 5, initial & 0x1F

        if major == _SIMPLE:
            if info == 20:
                return False
            if info == 21:
                return True
            if info == 22:
                return None
            raise CarDecodeError(f"Unsupported CBOR simple value {info}")

        value = self._argument(info)
        if major == _UINT:
            return value
        if major == _NEGINT:
            return -1 - value
        if major == _BYTES:
            return bytes(self._take(value))
        if major == _TEXT:
            try:
                return self._take(value).decode("utf-8")
            except UnicodeDecodeError as e:
                raise CarDecodeError(f"Invalid UTF-8 in CBOR text: {e}") from e
        if major == _ARRAY:
            return [self.read(depth + 1) for _ in range(value)]
        if major == _MAP:
            result: dict[Any, Any] = {}
            for _ in range(value):
                key = self.read(depth + 1)
                if not isinstance(key, str):
                    raise CarDecodeError("DAG-CBOR map keys must be strings")
                result[key] = self.read(depth + 1)
            return result
        # major == _TAG
        item = self.read(depth + 1)
        if value != CID_TAG:
            raise CarDecodeError(f"Unsupported CBOR tag {value}")
        return _decode_cid_link(item)


def _decode_cid_link(item: Any) -> CID:
    # Tag 42 wraps the binary CID prefixed with the identity multibase byte
    if not isinstance(item, bytes) or not item or item[0] != 0x00:
        raise CarDecodeError("Malformed CID link in CAR header")
    try:
        cid, end = CID.from_bytes(item, 1)
    except MultiformatError as e:
        raise CarDecodeError(f"Malformed CID link in CAR header: {e}") from e
    if end != len(item):
        raise CarDecodeError("Trailing bytes after CID link in CAR header")
    return cid


def decode_header(data: bytes) -> tuple[CarHeader, int]:
    """
    Decode the CAR header.

    Returns:
        (header, offset of the first block section)
    """
    try:
        length, pos = decode_varint(data, 0)
    except MultiformatError as e:
        raise CarDecodeError(f"Cannot read CAR header length: {e}") from e
    if length == 0:
        raise CarDecodeError("CAR header is empty")
    end = pos + length
    if end > len(data):
        raise CarDecodeError("CAR header is truncated")

    reader = _CborReader(data[pos:end])
    header = reader.read()
    if reader.pos != length:
        raise CarDecodeError("Trailing bytes in CAR header")
    if not isinstance(header, dict):
        raise CarDecodeError("CAR header must be a map")

    version = header.get("version")
    if version != 1:
        raise CarDecodeError(f"Unsupported CAR version {version!r}")
    roots = header.get("roots")
    if not isinstance(roots, list) or not all(isinstance(r, CID) for r in roots):
        raise CarDecodeError("CAR header roots must be a list of CIDs")
    return CarHeader(version=version, roots=tuple(roots)), end


def iter_blocks(data: bytes, offset: int) -> Iterator[CarBlock]:
    """Yield the block sections that follow the header."""
    pos = offset
    while pos < len(data):
        try:
            length, start = decode_varint(data, pos)
        except MultiformatError as e:
            raise CarDecodeError(f"Cannot read CAR section length: {e}") from e
        end = start + length
        if length == 0 or end > len(data):
            raise CarDecodeError("CAR section is empty or truncated")
        try:
            cid, data_start = CID.from_bytes(data, start)
        except MultiformatError as e:
            raise CarDecodeError(f"Cannot read block CID: {e}") from e
        if data_start > end:
            raise CarDecodeError("Block CID overruns its CAR section")
        yield CarBlock(cid=cid, data=bytes(data[data_start:end]))
        pos = end


def read_car(data: bytes) -> tuple[CarHeader, list[CarBlock]]:
    """
    Decode a complete CARv1 archive.

    Raises:
        CarDecodeError: If the archive is malformed
    """
    header, offset = decode_header(data)
    return header, list(iter_blocks(data, offset))
