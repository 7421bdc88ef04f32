"""
Module 09C - CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m spark_cli run [--no-api]
    python -m spark_cli check <cid> <provider-id> [--peer-id P] [--json]
    python -m spark_cli queue <cid> <provider-id> [--api-url URL] [--json]
    python -m spark_cli config --init | --show

Environment Variables:
    SPARK_STATION_ID            Station identity used for task sampling
    SPARK_API_URL               Round and measurement service
    SPARK_RPC_URL               Filecoin JSON-RPC endpoint
    SPARK_RPC_AUTH              Bearer token for the JSON-RPC endpoint
    SPARK_LASSIE_URL            Lassie daemon for GraphSync retrievals
    SPARK_LOG_LEVEL             Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from spark_cli import __version__
from spark_cli.commands import check, queue, run
from spark_cli.config import get_default_config_template, load_config


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_CHECK_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="spark",
        description="Spark station CLI - check retrievals from storage providers.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./spark.json or ~/.config/spark/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- run command ---
    run_parser = subparsers.add_parser(
        "run",
        help="Run the station",
        description="Fetch rounds, check the sampled assignments and submit measurements.",
    )
    run_parser.add_argument(
        "--no-api",
        action="store_true",
        default=False,
        help="Do not start the control API",
    )
    run_parser.set_defaults(func=run.run_cmd)

    # --- check command ---
    check_parser = subparsers.add_parser(
        "check",
        help="Check a single retrieval",
        description="Run one retrieval check and print the measurement (not submitted).",
    )
    check_parser.add_argument("cid", type=str, help="CID to retrieve")
    check_parser.add_argument("provider_id", type=str, help="Storage provider id, e.g. f03303347")
    check_parser.add_argument(
        "--peer-id",
        type=str,
        default=None,
        help="Use this peer id instead of looking it up",
    )
    check_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output the measurement as JSON",
    )
    check_parser.set_defaults(func=check.check_cmd)

    # --- queue command ---
    queue_parser = subparsers.add_parser(
        "queue",
        help="Queue an on-demand check in a running station",
        description="POST an assignment to the control API of a running station.",
    )
    queue_parser.add_argument("cid", type=str, help="CID to retrieve")
    queue_parser.add_argument("provider_id", type=str, help="Storage provider id")
    queue_parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="Control API URL (default: from config)",
    )
    queue_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="JSON output",
    )
    queue_parser.set_defaults(func=queue.queue_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="spark.json",
        help="Path for config file (default: spark.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (SPARK_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: spark config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=check failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)
    config.log_level = log_level

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
