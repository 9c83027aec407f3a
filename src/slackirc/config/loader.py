"""Config file loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from slackirc.core.errors import ConfigurationError


def load_config(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file with SafeLoader. Returns the raw dict.

    A missing or empty file yields ``{}``; required-field checks happen in
    :meth:`Config.reload`. A file that parses to something other than a
    mapping is a configuration error.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Config file not found: {}", path)
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        logger.error("Failed to parse config {}: {}", path, exc)
        raise

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a mapping",
            code="invalid_structure",
            details={"type": type(data).__name__},
        )
    return data


def load_config_with_env(path: str | Path) -> dict[str, Any]:
    """Load .env (when present) into the environment, then the YAML config."""
    from dotenv import load_dotenv

    load_dotenv()
    return load_config(path)
