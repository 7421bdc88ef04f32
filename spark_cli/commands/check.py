"""
Module 09C - CLI Check Command

Runs one retrieval check by hand and prints the measurement, followed by
commands that help troubleshoot a failed retrieval.

Usage:
    spark check <cid> <provider-id> [--peer-id P] [--json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace

from core.multiformats import AddressError, get_retrieval_url
from core.schemas import Assignment, Measurement
from station import StationContext
from station.runner import Station

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_CHECK_FAILED = 2

LASSIE_INSTALL = "https://github.com/filecoin-project/lassie?tab=readme-ov-file#installation"


def troubleshooting_hints(measurement: Measurement) -> list[str]:
    """Commands to reproduce a failed retrieval outside the station."""
    stats = measurement.stats
    if not stats.provider_address or stats.status_code == 200:
        return []

    cid = measurement.content_id
    address = json.dumps(stats.provider_address)
    lines = ["", "The retrieval failed."]
    lassie = (
        f"  lassie fetch -o /dev/null -vv --dag-scope block "
        f"--protocols {stats.protocol} --providers {address} {cid}"
    )

    if stats.protocol == "graphsync":
        lines += ["You can get more details by running Lassie manually:", "", lassie]
    elif stats.protocol == "http":
        try:
            url = get_retrieval_url("http", stats.provider_address, cid)
        except AddressError as e:
            lines.append(f"The provider address {address} cannot be converted to a URL: {e}")
            return lines
        lines += [
            "You can get more details by requesting the following URL yourself:",
            "",
            f"  {url}",
            "",
            "E.g. using `curl`:",
            f"  curl -i {json.dumps(url)}",
            "",
            "You can also test the retrieval using Lassie:",
            "",
            lassie,
        ]
    else:
        return []

    lines += ["", f"How to install Lassie: {LASSIE_INSTALL}"]
    return lines


def check_cmd(args: Namespace) -> int:
    """Execute the check command."""
    ctx = StationContext.create(args.cli_config)
    station = Station(ctx)
    assignment = Assignment(content_id=args.cid, provider_id=args.provider_id)

    measurement = station.perform_check(assignment, peer_id=args.peer_id)

    if args.json:
        print(json.dumps(measurement.to_wire(), indent=2))
    else:
        print("Measurement:")
        for key, value in measurement.to_wire().items():
            print(f"  {key}: {value}")
        for line in troubleshooting_hints(measurement):
            print(line)

    return EXIT_SUCCESS if measurement.stats.succeeded else EXIT_CHECK_FAILED
