"""Configuration module for safe-releases.

This module provides YAML and environment based configuration for the
release repository.
"""

from safe_releases.config.parser import (
    ReleaseRepoConfig,
    parse_config,
    load_config,
)
from safe_releases.core.exceptions import ConfigError

__all__ = [
    "ReleaseRepoConfig",
    "ConfigError",
    "parse_config",
    "load_config",
]
