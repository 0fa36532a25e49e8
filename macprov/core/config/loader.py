"""
Configuration loader — reads provision.yml into a ProvisionConfig.

provision.yml is optional. Without one every default applies, which
matches the stock checkout layout (Brewfile, zshrc_additions, git
templates in the working directory).
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from macprov.core.models.config import ProvisionConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = "provision.yml"


class ConfigError(Exception):
    """Raised when provision.yml exists but is unreadable or invalid."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for provision.yml from ``start_dir`` (default: cwd) upward."""
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path | None = None, start_dir: Path | None = None) -> ProvisionConfig:
    """Load and validate provisioning configuration.

    Args:
        path: Explicit provision.yml. Must exist when given.
        start_dir: Where to start searching when ``path`` is None.

    Returns:
        ProvisionConfig; all defaults when no file is found.

    Raises:
        ConfigError: If an explicit path is missing or a file is invalid.
    """
    if path is None:
        path = find_config_file(start_dir)
        if path is None:
            logger.debug("No %s found, using defaults", CONFIG_FILE)
            return ProvisionConfig()
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading provisioning config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return ProvisionConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = ProvisionConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid provisioning configuration in {path}: {e}") from e

    logger.info("Loaded provisioning config from %s", path)
    return config
