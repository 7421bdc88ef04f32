"""
Retrieval Module

Execution and verification of a single retrieval check.
"""

from .engine import (
    RetrievalEngine,
    RetrievalTimeout,
    is_timeout,
    map_error_to_status_code,
)
from .transports import BaseTransport, Protocol
from .verification import (
    CannotParseCar,
    HashMismatch,
    UnexpectedCarBlock,
    UnsupportedHash,
    VerificationError,
    verify_car,
)

__all__ = [
    "RetrievalEngine",
    "RetrievalTimeout",
    "is_timeout",
    "map_error_to_status_code",
    "BaseTransport",
    "Protocol",
    "CannotParseCar",
    "HashMismatch",
    "UnexpectedCarBlock",
    "UnsupportedHash",
    "VerificationError",
    "verify_car",
]
