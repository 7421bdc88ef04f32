"""
Multiformats Module

Self-describing formats used by the retrieval network: varints, multibase
strings, multihashes, content identifiers and provider multiaddrs.
"""

from .cid import CID, DAG_CBOR, DAG_PB, RAW
from .errors import CidDecodeError, MultiformatError
from .multiaddr import (
    AddressError,
    AddressErrorCode,
    get_retrieval_url,
    multiaddr_to_http_url,
)
from .multibase import MultibaseError, base32_encode, multibase_decode
from .multihash import Multihash
from .varint import VarintError, decode_varint, encode_varint

__all__ = [
    "CID",
    "DAG_CBOR",
    "DAG_PB",
    "RAW",
    "CidDecodeError",
    "MultiformatError",
    "AddressError",
    "AddressErrorCode",
    "get_retrieval_url",
    "multiaddr_to_http_url",
    "MultibaseError",
    "base32_encode",
    "multibase_decode",
    "Multihash",
    "VarintError",
    "decode_varint",
    "encode_varint",
]
