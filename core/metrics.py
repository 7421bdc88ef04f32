"""
Retrieval Metrics

Per-round counters of retrieval attempts and failures. One instance is owned
by the station runner and shared with the control API; it is reset at every
round boundary.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricsSnapshot:
    round: int
    total: int
    failed: int
    unique_pair_count: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class RetrievalMetrics:
    """Thread-safe counters for the current round."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._round_index = 0
        self._total = 0
        self._failed = 0
        self._pairs: set[tuple[str, str]] = set()

    def reset(self) -> None:
        """Start counting a new round."""
        with self._lock:
            self._round_index += 1
            self._total = 0
            self._failed = 0
            self._pairs.clear()

    def record_retrieval(self, cid: str, provider_id: str) -> None:
        with self._lock:
            self._total += 1
            self._pairs.add((cid, provider_id))

    def record_failure(self) -> None:
        with self._lock:
            self._failed += 1

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return MetricsSnapshot(
                round=self._round_index,
                total=self._total,
                failed=self._failed,
                unique_pair_count=len(self._pairs),
            )

    def report(self) -> MetricsSnapshot:
        """Log the totals of the current round and return them."""
        snap = self.snapshot()
        logger.info(
            "Round %d: %d retrievals (%d unique pairs), %d failed",
            snap.round,
            snap.total,
            snap.unique_pair_count,
            snap.failed,
        )
        return snap
