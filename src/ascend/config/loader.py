# src/ascend/config/loader.py
"""
Configuration loading.

Sources, lowest precedence first:

1. the packaged ``default_config.toml``;
2. a user TOML file (``~/.config/ascend/config.toml`` unless a path is given);
3. environment variables with the ``ASCEND`` prefix, ``__`` separating
   nesting levels (``ASCEND_STORE__BACKEND=http``);
4. an explicit overrides dictionary.

Merging is done by confy; the merged sections are then validated into a
:class:`~ascend.config.tracker_config.TrackerConfig`.
"""

import importlib.resources
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..exceptions import ConfigError
from .tracker_config import TrackerConfig

logger = logging.getLogger(__name__)

DEFAULT_USER_CONFIG_PATH = "~/.config/ascend/config.toml"
DEFAULT_ENV_PREFIX = "ASCEND"
CONFIG_SECTIONS = ("store", "history", "reminders", "scheduler", "suggestions", "logging")


def load_default_config() -> Dict[str, Any]:
    """Read the packaged default configuration."""
    default_path = importlib.resources.files("ascend.config").joinpath("default_config.toml")
    with default_path.open("rb") as f:
        return tomllib.load(f)


def _resolve_config_file(config_file_path: Optional[str]) -> Optional[str]:
    if config_file_path:
        path = os.path.expanduser(config_file_path)
        if not os.path.isfile(path):
            raise ConfigError(f"Configuration file not found: {path}")
        return path
    user_path = Path(os.path.expanduser(DEFAULT_USER_CONFIG_PATH))
    return str(user_path) if user_path.is_file() else None


def load_config(
    config_file_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    env_prefix: Optional[str] = DEFAULT_ENV_PREFIX,
) -> TrackerConfig:
    """
    Load and validate the tracker configuration.

    Args:
        config_file_path: Optional TOML file layered over the defaults.
        overrides: Optional nested dictionary applied last.
        env_prefix: Environment variable prefix; None disables env loading.

    Returns:
        The validated TrackerConfig.

    Raises:
        ConfigError: If any source cannot be read or the result is invalid.
    """
    file_path = _resolve_config_file(config_file_path)
    try:
        from confy.loader import Config as ConfyConfig

        merged = ConfyConfig(
            defaults=load_default_config(),
            file_path=file_path,
            prefix=env_prefix,
            overrides_dict=overrides,
        )
        sections = {name: dict(merged.get(name, {}) or {}) for name in CONFIG_SECTIONS}
    except Exception as e:
        raise ConfigError(f"Ascend configuration loading failed: {e}")

    try:
        config = TrackerConfig.model_validate(sections)
    except ValidationError as e:
        raise ConfigError(f"Invalid Ascend configuration: {e}")

    logger.debug("Configuration loaded (store backend: %s)", config.store.backend)
    return config
