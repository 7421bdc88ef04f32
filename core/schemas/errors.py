"""
Module 01 - Schemas
File: errors.py

Purpose: Outcome taxonomy and error hierarchy for the retrieval checker.

Two kinds of failures live here:
- StatusCode: the closed set of retrieval outcomes recorded in a measurement.
  These are stable values consumed by downstream aggregation and are never
  raised; every stage of a check converts its failure into one of them.
- StationException and subclasses: control-flow errors raised by the round
  scheduler, the measurement reporter and the provider lookups. The worker
  loop catches and logs them; they never terminate the process.
"""

from enum import IntEnum
from typing import Any


# =============================================================================
# Retrieval Outcomes (Measurement status codes)
# =============================================================================

class StatusCode(IntEnum):
    """Status codes recorded in RetrievalStats.status_code.

    Values below 600 are literal HTTP statuses returned by the provider.
    """

    OK = 200

    # Probe/transport threw before any HTTP response was obtained
    FETCH_FAILED = 600

    # 7xx: provider address cannot be turned into a URL
    UNSUPPORTED_HOST_TYPE = 701
    UNSUPPORTED_TRANSPORT = 702
    UNSUPPORTED_SCHEME = 703
    TOO_MANY_PARTS = 704
    INVALID_PATH = 705

    # 8xx: network connection errors
    DNS_ERROR = 801
    CONNECTION_REFUSED = 802

    # 9xx: content verification errors
    UNSUPPORTED_HASH = 901
    HASH_MISMATCH = 902
    UNEXPECTED_CAR_BLOCK = 903
    CANNOT_PARSE_CAR = 904

    @property
    def is_address_error(self) -> bool:
        return 700 <= self.value < 800

    @property
    def is_network_error(self) -> bool:
        return self.value == 600 or 800 <= self.value < 900

    @property
    def is_verification_error(self) -> bool:
        return 900 <= self.value < 1000


class IndexerResult:
    """Values recorded in RetrievalStats.indexer_result."""

    OK = "OK"
    HTTP_NOT_ADVERTISED = "HTTP_NOT_ADVERTISED"
    NO_VALID_ADVERTISEMENT = "NO_VALID_ADVERTISEMENT"
    ERROR_FETCH = "ERROR_FETCH"
    ERROR_FETCHING_PEER_ID = "ERROR_FETCHING_PEER_ID"

    @staticmethod
    def for_http_error(status_code: int) -> str:
        return f"ERROR_{status_code}"

    @staticmethod
    def provider_found(result: str | None) -> bool:
        return result in (IndexerResult.OK, IndexerResult.HTTP_NOT_ADVERTISED)


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes carried by StationException."""

    # Round scheduling
    ROUND_DISCOVERY_FAILED = "ROUND_DISCOVERY_FAILED"
    ROUND_INVALID = "ROUND_INVALID"

    # Measurement reporting
    MEASUREMENT_SUBMISSION_FAILED = "MEASUREMENT_SUBMISSION_FAILED"
    OUTDATED_CLIENT = "OUTDATED_CLIENT"

    # Collaborators
    PROVIDER_LOOKUP_FAILED = "PROVIDER_LOOKUP_FAILED"
    RPC_ERROR = "RPC_ERROR"
    CONTRACT_CALL_FAILED = "CONTRACT_CALL_FAILED"

    # Configuration
    CONFIG_INVALID = "CONFIG_INVALID"


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class StationException(Exception):
    """
    Base exception for all station errors.

    Carries a machine-readable code, structured details and whether the
    failed operation may be retried.
    """

    def __init__(
        self,
        message: str,
        code: str = "STATION_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
            "status_code": self.status_code,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class RoundDiscoveryError(StationException):
    """Raised when the current round cannot be discovered or fetched."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.ROUND_DISCOVERY_FAILED,
            details=details,
            retryable=True,
            status_code=status_code,
        )


class MeasurementSubmissionError(StationException):
    """Raised when the measurement service rejects a submission."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        server_message: str | None = None,
    ) -> None:
        details = {"server_message": server_message} if server_message else {}
        super().__init__(
            message=message,
            code=ErrorCodes.MEASUREMENT_SUBMISSION_FAILED,
            details=details,
            retryable=status_code is None or status_code >= 500,
            status_code=status_code,
        )
        self.server_message = server_message


class OutdatedClientError(MeasurementSubmissionError):
    """Raised when the measurement service no longer accepts this client version."""

    def __init__(self, message: str = "Station software is outdated") -> None:
        super().__init__(message, status_code=400, server_message="OUTDATED CLIENT")
        self.code = ErrorCodes.OUTDATED_CLIENT
        self.retryable = False


class ProviderLookupError(StationException):
    """Raised when a provider identity or index lookup fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.PROVIDER_LOOKUP_FAILED,
            details=details,
            retryable=status_code is None or status_code >= 500,
            status_code=status_code,
        )


class RpcError(StationException):
    """Raised when a JSON-RPC call fails or returns an error object."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        rpc_code: int | None = None,
    ) -> None:
        details = {"rpc_code": rpc_code} if rpc_code is not None else {}
        # An error object in a well-formed reply is a client-side failure
        if rpc_code is not None:
            retryable = False
        else:
            retryable = status_code is None or status_code >= 500
        super().__init__(
            message=message,
            code=ErrorCodes.RPC_ERROR,
            details=details,
            retryable=retryable,
            status_code=status_code,
        )
        self.rpc_code = rpc_code
