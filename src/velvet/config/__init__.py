"""Configuration management."""

from velvet.config.loader import ConfigError, find_config_file, load_config
from velvet.config.settings import Settings

__all__ = ["ConfigError", "Settings", "find_config_file", "load_config"]
