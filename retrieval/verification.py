"""
Module 06 - Retrieval
File: verification.py

Checks that a CAR returned by a provider holds exactly the requested block
and that the block hashes to the CID.
"""

from __future__ import annotations

from core.car import CarDecodeError, read_car
from core.crypto import UnsupportedHashError
from core.multiformats import CID, CidDecodeError
from core.schemas import StatusCode


class VerificationError(Exception):
    """Base class; `status_code` is the outcome recorded for the check."""

    status_code: StatusCode = StatusCode.CANNOT_PARSE_CAR


class UnsupportedHash(VerificationError):
    status_code = StatusCode.UNSUPPORTED_HASH


class HashMismatch(VerificationError):
    status_code = StatusCode.HASH_MISMATCH


class UnexpectedCarBlock(VerificationError):
    status_code = StatusCode.UNEXPECTED_CAR_BLOCK


class CannotParseCar(VerificationError):
    status_code = StatusCode.CANNOT_PARSE_CAR


def verify_car(cid_text: str, data: bytes) -> None:
    """
    Raises:
        CannotParseCar: Malformed archive, or an archive without blocks
        UnexpectedCarBlock: A block other than `cid_text` is present
        UnsupportedHash: The CID uses a hash function we cannot compute
        HashMismatch: The block bytes do not hash to the CID
    """
    try:
        expected = CID.decode(cid_text)
    except CidDecodeError as e:
        raise UnexpectedCarBlock(f"Requested CID is not valid: {e}") from e

    try:
        _, blocks = read_car(data)
    except CarDecodeError as e:
        raise CannotParseCar(str(e)) from e

    if not blocks:
        raise CannotParseCar("CAR file has no blocks")

    for block in blocks:
        if block.cid != expected:
            raise UnexpectedCarBlock(f"Unexpected block CID {block.cid}, expected {expected}")
        try:
            matches = block.cid.multihash.matches(block.data)
        except UnsupportedHashError as e:
            raise UnsupportedHash(str(e)) from e
        if not matches:
            raise HashMismatch(f"Block bytes do not hash to {expected}")
