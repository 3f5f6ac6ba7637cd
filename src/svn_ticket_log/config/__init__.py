"""Configuration management

YAML configuration file loading and management implementations.
"""

from .settings import LogMiningConfig, LoggingConfig, load_config, get_default_config, get_default_config_path

__all__ = [
    "LogMiningConfig",
    "LoggingConfig",
    "load_config",
    "get_default_config",
    "get_default_config_path",
]
