"""
Test fixtures package for station tests.

This package provides factory functions for creating test objects.
Organized into layers:
- common.py: Assignments, round payloads, fake HTTP and station contexts
- car_fixtures.py: CID and CAR archive builders

Usage:
    from fixtures.common import make_context, FakeResponse

    def test_something():
        ctx = make_context(lambda method, url, **kw: FakeResponse(200))
"""

from .car_fixtures import (
    HELLO_WORLD,
    HELLO_WORLD_CID,
    make_car,
    make_car_header,
    make_cid,
    make_single_block_car,
)
from .common import (
    FakeResponse,
    make_assignment,
    make_context,
    make_http,
    make_round_body,
    make_session,
    requested,
)

__all__ = [
    # CAR
    "HELLO_WORLD",
    "HELLO_WORLD_CID",
    "make_car",
    "make_car_header",
    "make_cid",
    "make_single_block_car",
    # Common
    "FakeResponse",
    "make_assignment",
    "make_context",
    "make_http",
    "make_round_body",
    "make_session",
    "requested",
]
