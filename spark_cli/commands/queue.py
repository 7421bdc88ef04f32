"""
Module 09C - CLI Queue Command

Asks a running station to check an assignment ahead of its round tasks.

Usage:
    spark queue <cid> <provider-id> [--api-url URL]
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace

from core.http import HttpClient, HttpError
from core.schemas import Assignment

# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def queue_cmd(args: Namespace) -> int:
    """Execute the queue command."""
    config = args.cli_config
    api_url = args.api_url or f"http://{config.control_api.host}:{config.control_api.port}"
    assignment = Assignment(content_id=args.cid, provider_id=args.provider_id)

    with HttpClient(timeout=10.0) as http:
        try:
            response = http.post(f"{api_url.rstrip('/')}/on-demand", json=assignment.to_wire())
        except HttpError as e:
            print(f"Error: cannot reach the station at {api_url}: {e}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

    if response.status_code != 202:
        print(f"Error: station refused the request ({response.status_code}): {response.text}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.json:
        print(json.dumps(response.json(), indent=2))
    else:
        print(f"On-demand check queued: {assignment}")
    return EXIT_SUCCESS
