"""
Module 05 - Station
File: tasker.py

Round/task scheduler.

Hands out the next assignment to check. Operator-queued on-demand checks
always go first; otherwise the scheduler walks the station's sample of the
current round, and discovers and fetches a new round once the sample is
exhausted.

Round discovery is two requests:

    GET {api}/rounds/current      -> 302, Location: /rounds/meridian/<contract>/<n>
    GET {api}{Location}           -> {roundId, startEpoch, taskQuotaPerNode, assignments}
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Optional
from urllib.parse import urljoin

from pydantic import ValidationError

from core.http import HttpError
from core.schemas import Assignment, Round, RoundDiscoveryError

from .context import StationContext
from .sampler import pick_tasks_for_node

logger = logging.getLogger(__name__)

DEFAULT_MAX_TASKS_PER_ROUND = 360

_JSON_HEADERS = {"Content-Type": "application/json"}


class Tasker:
    """
    Scheduler state: the on-demand queue and the sampled tasks of the
    current round with a cursor into them.

    `queue_on_demand` may be called from another thread (the control API);
    `next` is only called by the worker loop.
    """

    def __init__(
        self,
        ctx: StationContext,
        *,
        on_new_round: Optional[Callable[[Round], None]] = None,
    ) -> None:
        self.ctx = ctx
        self.on_new_round = on_new_round
        self.max_tasks_per_round = DEFAULT_MAX_TASKS_PER_ROUND
        self._on_demand: deque[Assignment] = deque()
        self._round: Optional[Round] = None
        self._tasks: list[Assignment] = []
        self._cursor = 0

    @property
    def current_round(self) -> Optional[Round]:
        return self._round

    @property
    def pending_on_demand(self) -> int:
        return len(self._on_demand)

    @property
    def remaining(self) -> int:
        """Sampled tasks of the current round not yet handed out."""
        return len(self._tasks) - self._cursor

    def queue_on_demand(self, assignment: Assignment) -> None:
        """Schedule a check ahead of the round's tasks."""
        self._on_demand.append(assignment)
        logger.info("Queued on-demand check %s (%d pending)", assignment, len(self._on_demand))

    def next(self) -> Optional[Assignment]:
        """
        Return the next assignment, or None when this station has no more
        work in the current round.

        Raises:
            RoundDiscoveryError: If a new round had to be fetched and that failed
        """
        try:
            return self._on_demand.popleft()
        except IndexError:
            pass

        if self.remaining > 0:
            return self._advance()

        location = self.discover_round()
        if self._round is not None and location == self._round.location:
            logger.debug("Round %s is still current and has no tasks left", self._round.round_id)
            return None

        self._start_round(self.fetch_round(location))
        if self.remaining > 0:
            return self._advance()
        return None

    def discover_round(self) -> str:
        """
        Ask the round service where the current round lives.

        Returns:
            The round resource path from the Location header

        Raises:
            RoundDiscoveryError: If the response is not a redirect with Location
        """
        url = f"{self.ctx.config.station.api_url.rstrip('/')}/rounds/current"
        try:
            response = self.ctx.http.get(
                url,
                headers=_JSON_HEADERS,
                timeout=self.ctx.config.station.round_timeout_s,
                allow_redirects=False,
            )
        except HttpError as e:
            raise RoundDiscoveryError(f"Cannot reach round service: {e}") from e

        location = response.header("Location")
        if response.status_code != 302 or not location:
            raise RoundDiscoveryError(
                f"Expected a redirect from {url}, got {response.status_code}",
                status_code=response.status_code,
                details={"body": response.text[:500]},
            )
        return location

    def fetch_round(self, location: str) -> Round:
        """
        Fetch and parse the round at `location`.

        Raises:
            RoundDiscoveryError: If the request fails or the body is not a round
        """
        url = urljoin(self.ctx.config.station.api_url, location)
        try:
            response = self.ctx.http.get(
                url,
                headers=_JSON_HEADERS,
                timeout=self.ctx.config.station.round_timeout_s,
            )
        except HttpError as e:
            raise RoundDiscoveryError(f"Cannot fetch round {location}: {e}") from e

        if not response.ok:
            raise RoundDiscoveryError(
                f"Cannot fetch round {location}: HTTP {response.status_code}",
                status_code=response.status_code,
                details={"body": response.text[:500]},
            )
        try:
            return Round.from_response(response.json(), location)
        except (ValueError, ValidationError) as e:
            raise RoundDiscoveryError(
                f"Invalid round payload at {location}: {e}",
                status_code=response.status_code,
            ) from e

    def _start_round(self, round_: Round) -> None:
        self._round = round_
        self.max_tasks_per_round = round_.task_quota_per_node
        self._tasks = pick_tasks_for_node(
            round_.assignments,
            self.ctx.station_id,
            round_.randomness,
            round_.task_quota_per_node,
        )
        self._cursor = 0
        logger.info(
            "Starting round %s: %d of %d tasks sampled for this station",
            round_.round_id,
            len(self._tasks),
            len(round_),
        )
        if self.on_new_round is not None:
            self.on_new_round(round_)

    def _advance(self) -> Assignment:
        task = self._tasks[self._cursor]
        self._cursor += 1
        return task
