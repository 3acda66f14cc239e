from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def _hardware_allowed() -> bool:
    return os.environ.get("ZONEDIAL_ALLOW_HARDWARE") == "1"


def _root(env_var: str, default: str) -> Path:
    # Test hook: allow overriding the sysfs/dev root.
    root = os.environ.get(env_var)

    # Safety: under pytest, never probe the real tree unless explicitly allowed.
    if root is None and os.environ.get("PYTEST_CURRENT_TEST") and not _hardware_allowed():
        return Path(f"/nonexistent-zonedial-test{default.replace('/', '-')}")

    return Path(root or default)


def backlight_root() -> Path:
    return _root("ZONEDIAL_SYSFS_BACKLIGHT_ROOT", "/sys/class/backlight")


def hidraw_root() -> Path:
    return _root("ZONEDIAL_SYSFS_HIDRAW_ROOT", "/sys/class/hidraw")


def dev_root() -> Path:
    return _root("ZONEDIAL_DEV_ROOT", "/dev")


def _is_real_sysfs_path(path: Path) -> bool:
    try:
        return os.path.realpath(str(path)).startswith("/sys/")
    except Exception:
        return False


def safe_write_text(path: Path, content: str) -> None:
    # Safety: tests must not mutate real hardware state by writing sysfs.
    if os.environ.get("PYTEST_CURRENT_TEST") and not _hardware_allowed() and _is_real_sysfs_path(path):
        raise RuntimeError(f"Refusing to write real sysfs path under pytest: {path}")
    path.write_text(content, encoding="utf-8")


def read_int(path: Path) -> int:
    return int(path.read_text(encoding="utf-8").strip())


def write_int(path: Path, value: int) -> None:
    if os.environ.get("ZONEDIAL_DEBUG_BRIGHTNESS") == "1":
        logger.info("sysfs.write %s <- %s", path, int(value))
    safe_write_text(path, f"{int(value)}\n")


def read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
