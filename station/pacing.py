"""
Module 05 - Station
File: pacing.py

Spreads a station's checks evenly over the round.
"""

MAX_DELAY_MS = 60_000


def calculate_delay_before_next_task(
    last_task_duration_ms: float,
    round_length_ms: float,
    max_tasks_per_round: int,
) -> float:
    """
    Milliseconds to wait before starting the next check.

    Each check gets an equal slice of the round; the time the last check
    already used is subtracted. The result is clamped to [0, 60s].
    """
    if max_tasks_per_round <= 0:
        return MAX_DELAY_MS
    base_delay = round_length_ms / max_tasks_per_round
    delay = base_delay - last_task_duration_ms
    return min(max(delay, 0), MAX_DELAY_MS)
