"""Configuration tooling for the Newsdesk aggregator."""
from __future__ import annotations

from .config_manager import ConfigError, check_consistency, load_config, source_of
from .config_schema import Config, DEFAULT_CONFIG

__all__ = [
    "load_config",
    "check_consistency",
    "source_of",
    "Config",
    "ConfigError",
    "DEFAULT_CONFIG",
]
