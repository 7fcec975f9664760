"""Configuration file loading."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from velvet.config.settings import Settings

CONFIG_FILENAMES = [".velvet.yaml", ".velvet.yml", "velvet.yaml", "velvet.yml"]


class ConfigError(Exception):
  """Config file exists but is not valid."""


def find_config_file(config_path: Path | None = None, root: Path | None = None) -> Path | None:
  """Find config file path, or None if no config exists."""
  if config_path:
    if not config_path.exists():
      raise FileNotFoundError(f"Config file not found: {config_path}")
    return config_path

  base = root or Path.cwd()
  for filename in CONFIG_FILENAMES:
    path = base / filename
    if path.exists():
      return path

  return None


def load_config(config_path: Path | None = None, root: Path | None = None) -> Settings:
  """Load configuration from file or defaults."""
  path = find_config_file(config_path, root)
  if path:
    return _load_from_file(path)
  return Settings()


def _load_from_file(path: Path) -> Settings:
  """Load settings from a YAML file."""
  with open(path) as f:
    try:
      data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
      raise ConfigError(f"Invalid YAML in {path}: {e}") from e

  if not isinstance(data, dict):
    raise ConfigError(f"Config file {path} must contain a mapping")

  return _parse_config(data, path)


def _parse_config(data: dict, path: Path | None = None) -> Settings:
  """Parse config dict into Settings."""
  try:
    return Settings(**data)
  except ValidationError as e:
    source = f" in {path}" if path else ""
    raise ConfigError(f"Invalid configuration{source}:\n{e}") from e
