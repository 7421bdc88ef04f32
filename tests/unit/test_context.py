"""
Station Context Unit Tests
Tests for station/context.py
"""
from datetime import datetime, timezone

from core.config import RuntimeConfig
from spark_cli import __version__
from station.context import FrozenClock, RealClock, StationContext


class TestStationContextCreate:
    """Tests for StationContext.create()."""

    def test_keeps_configured_station_id(self):
        config = RuntimeConfig.from_dict({"station": {"station_id": "abc"}})

        ctx = StationContext.create(config)

        assert ctx.station_id == "abc"
        assert isinstance(ctx.clock, RealClock)

    def test_generates_station_id(self):
        ctx = StationContext.create(RuntimeConfig())

        assert len(ctx.station_id) == 36
        assert StationContext.create(RuntimeConfig()).station_id != ctx.station_id

    def test_user_agent(self):
        ctx = StationContext.create(RuntimeConfig())

        assert ctx.http.default_headers["User-Agent"] == f"spark-station-py/{__version__}"


class TestFrozenClock:
    """Tests for FrozenClock."""

    def test_advance(self):
        start = datetime(2026, 3, 1, tzinfo=timezone.utc)
        clock = FrozenClock(start)

        assert clock.now() == start
        assert clock.monotonic() == 0

        clock.advance(2.5)

        assert clock.monotonic() == 2.5
        assert (clock.now() - start).total_seconds() == 2.5
