"""zonedial configuration.

Settings are read once at startup; there is no hot reload.
"""

from __future__ import annotations

from .defaults import DEFAULTS
from .file_storage import load_config_settings
from .paths import config_dir, config_file_path, lock_file_path
from .settings import DaemonSettings, load_settings


__all__ = [
    "DEFAULTS",
    "DaemonSettings",
    "config_dir",
    "config_file_path",
    "load_config_settings",
    "load_settings",
    "lock_file_path",
]
