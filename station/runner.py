"""
Module 05 - Station
File: runner.py

The worker loop: next assignment -> check -> report -> pace -> sleep.

A single serial loop per process. Errors from any step are logged and the
loop carries on after the usual pacing delay.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from core.schemas import Assignment, Measurement, OutdatedClientError, Round, new_stats
from retrieval import RetrievalEngine

from .context import StationContext
from .pacing import calculate_delay_before_next_task
from .reporter import build_measurement, submit_measurement
from .tasker import Tasker

logger = logging.getLogger(__name__)


class Station:
    """
    Usage:
        station = Station(StationContext.create(config))
        station.run()
    """

    def __init__(
        self,
        ctx: StationContext,
        *,
        tasker: Optional[Tasker] = None,
        engine: Optional[RetrievalEngine] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.ctx = ctx
        self.tasker = tasker or Tasker(ctx)
        if self.tasker.on_new_round is None:
            self.tasker.on_new_round = self._on_new_round
        self.engine = engine or RetrievalEngine(ctx)
        self._stop = threading.Event()
        self._sleep = sleep or self._stop.wait

    def _on_new_round(self, round_: Round) -> None:
        if self.ctx.metrics.snapshot().round > 0:
            self.ctx.metrics.report()
        self.ctx.metrics.reset()

    def perform_check(self, assignment: Assignment, *, peer_id: Optional[str] = None) -> Measurement:
        """Check one assignment and build its measurement (not submitted)."""
        stats = new_stats()
        self.engine.check(assignment, stats, peer_id=peer_id)
        stats.mark_complete()
        return build_measurement(self.ctx, assignment, stats)

    def run_once(self) -> float:
        """
        Process at most one assignment.

        Returns:
            Milliseconds to wait before the next iteration
        """
        started = self.ctx.clock.monotonic()
        try:
            assignment = self.tasker.next()
            if assignment is None:
                logger.info("No more tasks for this station in the current round")
            else:
                measurement = self.perform_check(assignment)
                submit_measurement(self.ctx, measurement)
        except OutdatedClientError:
            logger.error("This station is outdated. Please upgrade to the latest version.")
        except Exception:
            logger.exception("Error running the retrieval check")

        duration_ms = (self.ctx.clock.monotonic() - started) * 1000
        return calculate_delay_before_next_task(
            duration_ms,
            self.ctx.config.station.round_length_ms,
            self.tasker.max_tasks_per_round,
        )

    def run(self, *, max_iterations: Optional[int] = None) -> None:
        """Loop until `stop()` is called or `max_iterations` is reached."""
        logger.info("Station %s starting", self.ctx.station_id)
        iterations = 0
        while not self._stop.is_set():
            delay_ms = self.run_once()
            iterations += 1
            if max_iterations is not None and iterations >= max_iterations:
                break
            logger.info("Sleeping for %.1f seconds before starting the next task...", delay_ms / 1000)
            self._sleep(delay_ms / 1000)
        logger.info("Station %s stopped", self.ctx.station_id)

    def stop(self) -> None:
        self._stop.set()
