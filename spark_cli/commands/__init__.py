"""
CLI command modules.
"""

from spark_cli.commands import check, queue, run

__all__ = ["check", "queue", "run"]
