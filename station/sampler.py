"""
Module 05 - Station
File: sampler.py

Deterministic task sampling.

Every station ranks the round's assignments by the XOR distance between the
assignment key and its own station key, and takes the closest `quota`. Any
station can recompute another station's subset, but nobody can predict it
before the round randomness is published.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from core.crypto import hash_text_to_int
from core.schemas import Assignment


def get_task_key(content_id: str, provider_id: str, randomness: str) -> int:
    """SHA-256 of `content_id \\n provider_id \\n randomness` as a big-endian int."""
    return hash_text_to_int("\n".join([content_id, provider_id, randomness]))


@lru_cache(maxsize=8)
def get_station_key(station_id: str) -> int:
    """SHA-256 of the station id as a big-endian int."""
    return hash_text_to_int(station_id)


def pick_tasks_for_node(
    tasks: Iterable[Assignment],
    station_id: str,
    randomness: str,
    max_tasks_per_node: int,
) -> list[Assignment]:
    """
    Select this station's assignments for the round.

    The pool is sorted by ascending XOR distance to the station key; ties
    keep their pool order. The input is not modified.
    """
    if max_tasks_per_node <= 0:
        return []

    station_key = get_station_key(station_id)
    ranked = sorted(
        tasks,
        key=lambda t: get_task_key(t.content_id, t.provider_id, randomness) ^ station_key,
    )
    return ranked[:max_tasks_per_node]
