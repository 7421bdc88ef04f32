"""
Module 09C - CLI Run Command

Starts the station worker loop, with the control API on a side thread.

Usage:
    spark run [--no-api]
"""

from __future__ import annotations

import logging
from argparse import Namespace

from station import StationContext
from station.runner import Station

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def run_cmd(args: Namespace) -> int:
    """Execute the run command."""
    config = args.cli_config
    ctx = StationContext.create(config)
    station = Station(ctx)

    if config.control_api.enabled and not args.no_api:
        from api.app import create_app, start_control_api

        app = create_app(station.tasker, ctx.metrics)
        start_control_api(app, config.control_api.host, config.control_api.port)

    try:
        station.run()
    except KeyboardInterrupt:
        station.stop()
        logger.info("Interrupted, shutting down")
    return EXIT_SUCCESS
