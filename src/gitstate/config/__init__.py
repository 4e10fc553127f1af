"""Configuration loading, schema, and defaults."""

from gitstate.config.loader import ConfigError, load_config
from gitstate.config.schema import GitConfig, GitStateConfig, OutputConfig

__all__ = [
    "ConfigError",
    "GitConfig",
    "GitStateConfig",
    "OutputConfig",
    "load_config",
]
