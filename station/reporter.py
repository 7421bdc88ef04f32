"""
Module 05 - Station
File: reporter.py

Submits measurements to the measurement service.
"""

from __future__ import annotations

import logging
import platform
from typing import Any

from core.http import HttpError
from core.schemas import (
    Assignment,
    Measurement,
    MeasurementSubmissionError,
    OutdatedClientError,
    RetrievalStats,
)

from .context import StationContext

logger = logging.getLogger(__name__)

OUTDATED_CLIENT = "OUTDATED CLIENT"


def runtime_version() -> str:
    return f"{platform.python_implementation().lower()}/{platform.python_version()}"


def build_measurement(
    ctx: StationContext,
    assignment: Assignment,
    stats: RetrievalStats,
) -> Measurement:
    from spark_cli import __version__

    return Measurement.build(
        assignment,
        stats,
        station_id=ctx.station_id,
        spark_version=__version__,
        runtime_version=runtime_version(),
        participant_address=ctx.config.station.participant_address,
    )


def submit_measurement(ctx: StationContext, measurement: Measurement) -> Any:
    """
    POST the measurement and return the id assigned by the service.

    Raises:
        OutdatedClientError: If the service rejects this client version
        MeasurementSubmissionError: On any other failure
    """
    url = f"{ctx.config.station.api_url.rstrip('/')}/measurements"
    payload = measurement.to_wire()
    logger.debug("Submitting measurement %s", payload)

    try:
        response = ctx.http.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=ctx.config.station.round_timeout_s,
        )
    except HttpError as e:
        raise MeasurementSubmissionError(f"Cannot submit measurement: {e}") from e

    if response.status_code == 400 and OUTDATED_CLIENT in response.text:
        raise OutdatedClientError()
    if not response.ok:
        raise MeasurementSubmissionError(
            f"Failed to submit measurement ({response.status_code})",
            status_code=response.status_code,
            server_message=response.text,
        )

    measurement_id = response.json().get("id")
    logger.info("Measurement submitted (id: %s)", measurement_id)
    return measurement_id
