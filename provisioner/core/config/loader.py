"""
Configuration loader: reads the key-value config file into a RunConfig.

The file uses shell-style assignments so it can also be sourced by
the bootstrap scripts:

    GIT_REPO_URL="https://github.com/acme/server-modules.git"
    MODULE_REPO_DIR=/opt/provisioner-modules
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from provisioner.core.errors import ConfigError
from provisioner.core.models.config import CONFIG_KEYS, REQUIRED_KEYS, RunConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "/etc/provisioner/config.conf"
CONFIG_ENV_VAR = "PROVISIONER_CONFIG"

# Optional keys whose empty value is meaningful rather than "unset"
_EMPTY_ALLOWED = {"MODULE_SUBDIR"}

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_FILE",
    "ConfigError",
    "load_config",
    "parse_config_text",
    "resolve_config_path",
]


def resolve_config_path(path: Path | None = None) -> Path:
    """Pick the config file: explicit path > $PROVISIONER_CONFIG > default."""
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path(DEFAULT_CONFIG_FILE)


def parse_config_text(content: str) -> dict[str, str]:
    """Parse shell-style assignments into a key/value dict.

    Handles:
    - KEY=value
    - KEY="value" and KEY='value'
    - export KEY=value
    - Comments (#), full-line and after an unquoted value
    - Empty lines
    """
    result: dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("export "):
            line = line[7:].strip()

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip()
        value = value.strip()

        if value[:1] in ('"', "'"):
            quote = value[0]
            end = value.find(quote, 1)
            value = value[1:end] if end != -1 else value[1:]
        elif " #" in value:
            value = value.split(" #", 1)[0].rstrip()

        result[key] = value
    return result


def load_config(path: Path | None = None) -> RunConfig:
    """Load and validate the run configuration.

    Args:
        path: Explicit config file. If None, see ``resolve_config_path``.

    Returns:
        Frozen RunConfig.

    Raises:
        ConfigError: If the file is missing, unreadable, lacks a required
            variable, or holds an invalid value. The message names the
            file and every offending variable.
    """
    path = resolve_config_path(path)

    if not path.is_file():
        raise ConfigError(
            f"Configuration file not found at {path}. "
            f"Please create it and define {' and '.join(REQUIRED_KEYS)}."
        )

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    values = parse_config_text(raw)

    missing = [key for key in REQUIRED_KEYS if not values.get(key, "").strip()]
    if missing:
        names = " and ".join(missing)
        verb = "is" if len(missing) == 1 else "are"
        raise ConfigError(
            f"{names} {verb} not defined in {path}. "
            "Please define them before running."
        )

    data: dict[str, object] = {"source": path}
    for key, field in CONFIG_KEYS.items():
        if key not in values:
            continue
        value = values[key].strip()
        if not value and key not in _EMPTY_ALLOWED:
            continue
        data[field] = value

    unknown = sorted(set(values) - set(CONFIG_KEYS))
    if unknown:
        logger.debug("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))

    try:
        config = RunConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.debug("Parsed configuration from %s", path)
    return config
