"""
Station Module

Round scheduling, task sampling, pacing and measurement reporting. The
worker loop lives in station.runner.
"""

from .context import Clock, FrozenClock, RealClock, StationContext
from .pacing import calculate_delay_before_next_task
from .reporter import build_measurement, submit_measurement
from .sampler import get_station_key, get_task_key, pick_tasks_for_node
from .tasker import DEFAULT_MAX_TASKS_PER_ROUND, Tasker

__all__ = [
    "Clock",
    "FrozenClock",
    "RealClock",
    "StationContext",
    "calculate_delay_before_next_task",
    "build_measurement",
    "submit_measurement",
    "get_station_key",
    "get_task_key",
    "pick_tasks_for_node",
    "DEFAULT_MAX_TASKS_PER_ROUND",
    "Tasker",
]
