"""
Station Context

Provides dependency injection for the station components, containing:
- HTTP client
- Configuration
- Clock (can be frozen for determinism)
- Retrieval metrics

Components receive context rather than creating their own clients,
enabling testability.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from core.config import RuntimeConfig
from core.http import HttpClient
from core.metrics import RetrievalMetrics


class Clock(Protocol):
    """
    Protocol for time source.

    Can be real time or frozen for deterministic testing.
    """
    def now(self) -> datetime:
        """Get current UTC time."""
        ...

    def monotonic(self) -> float:
        """Seconds from an arbitrary origin, never going backwards."""
        ...


class RealClock:
    """Real-time clock implementation."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()


class FrozenClock:
    """
    Frozen clock for deterministic testing.

    Returns the same time until advanced.
    """

    def __init__(self, frozen_time: Optional[datetime] = None) -> None:
        self._time = frozen_time or datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        self._origin = self._time

    def now(self) -> datetime:
        return self._time

    def monotonic(self) -> float:
        return (self._time - self._origin).total_seconds()

    def advance(self, seconds: float) -> None:
        self._time += timedelta(seconds=seconds)


@dataclass
class StationContext:
    """
    Context providing dependencies to the station components.

    Usage:
        ctx = StationContext.create(config)
        engine = RetrievalEngine(ctx)
    """

    http: HttpClient = field(default_factory=HttpClient)
    config: RuntimeConfig = field(default_factory=RuntimeConfig)

    clock: Clock = field(default_factory=RealClock)
    metrics: RetrievalMetrics = field(default_factory=RetrievalMetrics)

    @property
    def station_id(self) -> str:
        return self.config.station.station_id

    @classmethod
    def create(cls, config: RuntimeConfig) -> "StationContext":
        """
        Create a fully configured context.

        A station without a configured identity gets a random one for the
        lifetime of the process.

        Args:
            config: Runtime configuration
        """
        from spark_cli import __version__

        if not config.station.station_id:
            config.station.station_id = str(uuid.uuid4())

        http = HttpClient(
            timeout=config.station.round_timeout_s,
            default_headers={"User-Agent": f"spark-station-py/{__version__}"},
            proxy=config.proxy,
        )

        return cls(http=http, config=config, clock=RealClock())

    def now(self) -> datetime:
        """Get current time from clock."""
        return self.clock.now()
