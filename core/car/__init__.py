"""
Content-Addressed Archive Module

CARv1 decoding for archives returned by retrieval providers.
"""

from .reader import (
    CarBlock,
    CarDecodeError,
    CarHeader,
    decode_header,
    iter_blocks,
    read_car,
)

__all__ = [
    "CarBlock",
    "CarDecodeError",
    "CarHeader",
    "decode_header",
    "iter_blocks",
    "read_car",
]
