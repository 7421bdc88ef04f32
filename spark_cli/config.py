"""
Module 09C - CLI Configuration

Locates the station configuration file and overlays environment variables.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from core.config import RuntimeConfig

logger = logging.getLogger(__name__)


def default_config_paths() -> list[Path]:
    return [
        Path.cwd() / "spark.json",
        Path.cwd() / ".spark.json",
        Path.home() / ".config" / "spark" / "config.json",
    ]


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file (JSON or YAML)

    Returns:
        Merged configuration
    """
    config = RuntimeConfig()

    if config_path is not None:
        config = RuntimeConfig.from_file(config_path)
    else:
        for default_path in default_config_paths():
            if default_path.exists():
                config = RuntimeConfig.from_file(default_path)
                break

    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    template = RuntimeConfig().to_dict()
    template["rpc"]["auth_token"] = ""
    return json.dumps(template, indent=2) + "\n"
