"""
Module 01 - Schemas
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Error taxonomy and exceptions
from .errors import (
    ErrorCodes,
    IndexerResult,
    MeasurementSubmissionError,
    OutdatedClientError,
    ProviderLookupError,
    RoundDiscoveryError,
    RpcError,
    StationException,
    StatusCode,
)

# Assignments and rounds
from .assignment import (
    Assignment,
    Round,
)

# Outcome records
from .measurement import (
    Measurement,
    RetrievalStats,
    StatsAlreadyCompleteError,
    new_stats,
)

__all__ = [
    # Errors
    "ErrorCodes",
    "IndexerResult",
    "MeasurementSubmissionError",
    "OutdatedClientError",
    "ProviderLookupError",
    "RoundDiscoveryError",
    "RpcError",
    "StationException",
    "StatusCode",
    # Assignments
    "Assignment",
    "Round",
    # Measurements
    "Measurement",
    "RetrievalStats",
    "StatsAlreadyCompleteError",
    "new_stats",
]
