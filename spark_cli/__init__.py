"""
Module 09C - Spark CLI

Command-line interface for the retrieval-checker station.

Usage:
    python -m spark_cli run
    python -m spark_cli check <cid> <provider-id>
    python -m spark_cli queue <cid> <provider-id>
    python -m spark_cli config --init
"""

__version__ = "1.17.0"
