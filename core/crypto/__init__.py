"""
Core cryptographic utilities.

Module 02 provides hashing utilities: sampling keys, multihash functions
and archive checksums.
"""
from .hashing import (
    BLAKE2B_256,
    HASH_FUNCTIONS,
    IDENTITY,
    SHA2_256,
    SHA2_512,
    SHA3_256,
    UnsupportedHashError,
    car_checksum,
    from_hex,
    hash_text_to_int,
    multihash_digest,
    sha256,
    to_hex,
)

__all__ = [
    "BLAKE2B_256",
    "HASH_FUNCTIONS",
    "IDENTITY",
    "SHA2_256",
    "SHA2_512",
    "SHA3_256",
    "UnsupportedHashError",
    "car_checksum",
    "from_hex",
    "hash_text_to_int",
    "multihash_digest",
    "sha256",
    "to_hex",
]
