"""Configuration loading for nsenum."""

from __future__ import annotations

from nsenum.config.ignore import IgnorePatterns, load_ignore_patterns
from nsenum.config.loader import ConfigError, find_project_config, load_config
from nsenum.config.models import NsenumConfig

__all__ = [
    "ConfigError",
    "IgnorePatterns",
    "NsenumConfig",
    "find_project_config",
    "load_config",
    "load_ignore_patterns",
]
