"""
Runtime Configuration Module

Provides configuration loading and management for the station.
"""

from .runtime import (
    ControlApiConfig,
    IndexConfig,
    LassieConfig,
    RpcConfig,
    RuntimeConfig,
    StationConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "ControlApiConfig",
    "IndexConfig",
    "LassieConfig",
    "RpcConfig",
    "RuntimeConfig",
    "StationConfig",
    "get_default_config",
    "set_default_config",
]
