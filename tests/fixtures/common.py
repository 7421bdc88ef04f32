"""
Common test fixtures shared by all modules.

Provides factory functions for:
- Assignments and round payloads
- A station context with a frozen clock and a mocked HTTP session
- Fake `requests` responses (buffered and streaming)
"""

from datetime import timedelta
from typing import Any, Callable, Iterable, Optional
from unittest.mock import Mock

from core.config import RuntimeConfig
from core.http import HttpClient
from core.metrics import RetrievalMetrics
from core.schemas import Assignment
from station.context import FrozenClock, StationContext


# =============================================================================
# Assignment / Round Factories
# =============================================================================

def make_assignment(content_id: str = "bafyone", provider_id: str = "f010") -> Assignment:
    return Assignment(content_id=content_id, provider_id=provider_id)


def make_round_body(
    round_id: str = "115",
    assignments: Optional[list[dict[str, str]]] = None,
    quota: int = 1,
    **extra: Any,
) -> dict[str, Any]:
    """Round payload in the shape served by the round service."""
    body = {
        "roundId": round_id,
        "startEpoch": 4111111,
        "maxTasksPerNode": quota,
        "retrievalTasks": assignments if assignments is not None else [
            {"cid": "bafyone", "minerId": "f010"},
            {"cid": "bafytwo", "minerId": "f020"},
        ],
    }
    body.update(extra)
    return body


# =============================================================================
# Fake HTTP Responses
# =============================================================================

class FakeResponse:
    """Just enough of `requests.Response` for HttpClient and the engine."""

    def __init__(
        self,
        status_code: int = 200,
        content: bytes = b"",
        headers: Optional[dict[str, str]] = None,
        *,
        json_body: Any = None,
        chunks: Optional[Iterable[bytes]] = None,
        error_after: Optional[Exception] = None,
        url: str = "",
    ) -> None:
        if json_body is not None:
            import json
            content = json.dumps(json_body).encode()
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self.url = url
        self.elapsed = timedelta(milliseconds=5)
        # Left unconsumed so a generator can act between chunks
        self._chunks = chunks if chunks is not None else [content]
        self._error_after = error_after
        self.closed = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def iter_content(self, chunk_size: int = 1) -> Iterable[bytes]:
        for chunk in self._chunks:
            yield chunk
        if self._error_after is not None:
            raise self._error_after

    def close(self) -> None:
        self.closed = True


def make_session(handler: Callable[..., FakeResponse]) -> Mock:
    """Mock session whose `request` is served by `handler(method, url, **kwargs)`."""
    session = Mock()
    session.request.side_effect = handler
    return session


def make_http(handler: Callable[..., FakeResponse]) -> HttpClient:
    return HttpClient(timeout=5.0, session=make_session(handler))


def make_context(
    handler: Optional[Callable[..., FakeResponse]] = None,
    *,
    station_id: str = "test-station",
    **station_overrides: Any,
) -> StationContext:
    """StationContext with a frozen clock; HTTP served by `handler`."""
    def _unexpected(method: str, url: str, **kwargs: Any) -> FakeResponse:
        raise AssertionError(f"Unexpected request: {method} {url}")

    config = RuntimeConfig.from_dict({
        "station": {"station_id": station_id, **station_overrides},
    })
    return StationContext(
        http=make_http(handler or _unexpected),
        config=config,
        clock=FrozenClock(),
        metrics=RetrievalMetrics(),
    )


def requested(session_or_http: Any) -> list[tuple[str, str]]:
    """(method, url) of every request sent through a mocked session."""
    session = getattr(session_or_http, "_session", session_or_http)
    return [
        (call.kwargs["method"], call.kwargs["url"])
        for call in session.request.call_args_list
    ]
