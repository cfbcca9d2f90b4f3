"""Runtime settings for owon-dge.

Defaults come from ``constants``; a user config file and environment
variables can override them.  The config file is only ever read.

Config is looked up at ~/.config/owon-dge/config.json (XDG-compliant)::

    {"timeout_ms": 1000, "max_devices": 4}

Environment overrides (take precedence over the file)::

    OWON_DGE_TIMEOUT_MS=1000
    OWON_DGE_MAX_DEVICES=4

Usage:
    from owon_dge.conf import settings

    settings.timeout_ms     # bulk transfer timeout
    settings.max_devices    # scan accumulator bound
"""
from __future__ import annotations

import json
import logging
import os
from typing import Optional

from .constants import DEFAULT_TIMEOUT_MS, MAX_DEVICES

log = logging.getLogger(__name__)

# =========================================================================
# Config file location (XDG-compliant)
# =========================================================================

_XDG_CONFIG = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
CONFIG_DIR = os.path.join(_XDG_CONFIG, 'owon-dge')
CONFIG_PATH = os.path.join(CONFIG_DIR, 'config.json')

ENV_TIMEOUT_MS = 'OWON_DGE_TIMEOUT_MS'
ENV_MAX_DEVICES = 'OWON_DGE_MAX_DEVICES'


def load_config(path: Optional[str] = None) -> dict:
    """Load user config from disk. Returns empty dict on missing/corrupt file."""
    try:
        with open(path or CONFIG_PATH, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return config if isinstance(config, dict) else {}


def _positive_int(value, name: str) -> Optional[int]:
    """Parse a positive int setting, or None (with a warning) if invalid."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        log.warning("Ignoring %s=%r: not an integer", name, value)
        return None
    if number <= 0:
        log.warning("Ignoring %s=%r: must be positive", name, value)
        return None
    return number


# =========================================================================
# Settings singleton
# =========================================================================

class Settings:
    """Application-wide settings singleton.

    Values are resolved lazily on first access; ``reload()`` drops the
    cache so a changed file or environment is picked up.
    """

    def __init__(self, config_path: Optional[str] = None) -> None:
        self._config_path = config_path
        self._config: Optional[dict] = None

    def reload(self) -> None:
        self._config = None

    def _get(self, key: str, env: str, default: int) -> int:
        if self._config is None:
            self._config = load_config(self._config_path)

        if env in os.environ:
            value = _positive_int(os.environ[env], env)
            if value is not None:
                return value
        if key in self._config:
            value = _positive_int(self._config[key], key)
            if value is not None:
                return value
        return default

    @property
    def timeout_ms(self) -> int:
        return self._get('timeout_ms', ENV_TIMEOUT_MS, DEFAULT_TIMEOUT_MS)

    @property
    def max_devices(self) -> int:
        return self._get('max_devices', ENV_MAX_DEVICES, MAX_DEVICES)


# Module-level singleton - import and use directly
settings = Settings()
