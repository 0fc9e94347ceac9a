"""Configuration loading with YAML parsing and environment variable expansion."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from pmml_relay.config.schema import RelayConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = [
    Path("pmml-relay.yaml"),
    Path("~/.pmml-relay/config.yaml").expanduser(),
]

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


def _expand_env_vars(value: Any) -> Any:
    """Recursively expand ${ENV_VAR} references in config values."""
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), ""), value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


def _find_config_file(explicit_path: str | Path | None = None) -> Path | None:
    """Find the config file to load."""
    if explicit_path is not None:
        path = Path(explicit_path).expanduser()
        if path.exists():
            return path
        logger.warning("Config file not found: %s", path)
        return None

    for candidate in DEFAULT_CONFIG_PATHS:
        resolved = candidate.expanduser()
        if resolved.exists():
            logger.info("Using config: %s", resolved)
            return resolved

    return None


def load_config(path: str | Path | None = None) -> RelayConfig:
    """Load and validate configuration.

    Resolution order:
    1. Explicit path argument
    2. pmml-relay.yaml in current directory
    3. ~/.pmml-relay/config.yaml
    4. All defaults (no file needed)

    Environment variables are expanded in string values: ${VAR_NAME}

    A relative ``model.pmml_path`` is taken relative to the directory of
    the config file it was read from.
    """
    config_path = _find_config_file(path)

    if config_path is not None:
        logger.info("Loading config from %s", config_path)
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        raw = _expand_env_vars(raw)
    else:
        logger.info("No config file found, using defaults")
        raw = {}

    config = RelayConfig.model_validate(raw)
    if config_path is not None:
        _anchor_model_path(config, config_path.parent)
    logger.debug("Config loaded: version=%d", config.version)
    return config


def resolve_path(path_str: str | Path) -> Path:
    """Resolve a path from config, expanding ~ and making absolute."""
    return Path(path_str).expanduser().resolve()


def _anchor_model_path(config: RelayConfig, base_dir: Path) -> None:
    pmml_path = config.model.pmml_path
    if not pmml_path:
        return
    path = Path(pmml_path).expanduser()
    if not path.is_absolute():
        config.model.pmml_path = str(resolve_path(base_dir / path))
        logger.debug("PMML path resolved to %s", config.model.pmml_path)
