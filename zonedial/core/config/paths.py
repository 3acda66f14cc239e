"""Where the daemon keeps its config file and single-instance lock.

The daemon is often started by a system service as root, where no per-user
config exists; `/etc/zonedial/config.json` is read in that case.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

APP_DIR_NAME = "zonedial"
CONFIG_FILE_NAME = "config.json"
LOCK_FILE_NAME = "zonedial.lock"

SYSTEM_CONFIG_DIR = Path("/etc") / APP_DIR_NAME


def _env_path(name: str) -> Optional[Path]:
    value = (os.environ.get(name) or "").strip()
    return Path(value) if value else None


def config_dir() -> Path:
    """Per-user directory: $ZONEDIAL_CONFIG_DIR, else the XDG config home."""

    explicit = _env_path("ZONEDIAL_CONFIG_DIR")
    if explicit is not None:
        return explicit

    base = _env_path("XDG_CONFIG_HOME") or Path.home() / ".config"
    return base / APP_DIR_NAME


def config_file_path(*, system_dir: Path = SYSTEM_CONFIG_DIR) -> Path:
    explicit = _env_path("ZONEDIAL_CONFIG_PATH")
    if explicit is not None:
        return explicit

    user_file = config_dir() / CONFIG_FILE_NAME
    if _env_path("ZONEDIAL_CONFIG_DIR") is not None or user_file.exists():
        return user_file

    system_file = system_dir / CONFIG_FILE_NAME
    return system_file if system_file.exists() else user_file


def lock_file_path() -> Path:
    return config_dir() / LOCK_FILE_NAME
