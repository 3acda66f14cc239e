from __future__ import annotations

import argparse
import logging
import os
import sys
from contextlib import suppress
from typing import IO, Optional

from zonedial import __version__
from zonedial.core.actions import ACTIONS, DialBindings, describe_profile
from zonedial.core.backlight import find_backlight
from zonedial.core.config import lock_file_path
from zonedial.core.sources import EvdevDialSource, HidrawDialSource


logger = logging.getLogger(__name__)

_instance_lock_fh: Optional[IO[str]] = None


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zonedial",
        description="Map the ZOTAC Zone dials to keys, scrolling or display brightness.",
    )
    # Defaults stay None so config.json values are not overridden.
    parser.add_argument("--left", help="action for the left dial (default: volume)")
    parser.add_argument("--right", help="action for the right dial (default: brightness)")
    parser.add_argument(
        "--source",
        choices=("auto", "hidraw", "evdev"),
        help="dial interface to read (default: auto)",
    )
    parser.add_argument("--device-name", dest="device_name", help="evdev device name substring to match")
    parser.add_argument("--list-actions", action="store_true", help="print the available actions and exit")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(*, debug: bool = False) -> None:
    """Configure root logging for the daemon.

    If callers already configured logging handlers, we don't override them.
    """

    if logging.getLogger().handlers:
        return

    level = logging.DEBUG if (debug or os.environ.get("ZONEDIAL_DEBUG")) else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def format_action_catalog() -> str:
    width = max(len(name) for name in ACTIONS)
    return "\n".join(f"{name.ljust(width)}  {describe_profile(profile)}" for name, profile in ACTIONS.items())


def log_startup_diagnostics_if_debug(bindings: DialBindings) -> None:
    """Log what the daemon will drive when debug logging is enabled.

    Best-effort only; must never fail startup.
    """

    if not logger.isEnabledFor(logging.DEBUG):
        return

    try:
        logger.debug("left dial: %s (%s)", bindings.left_name, describe_profile(bindings.left))
        logger.debug("right dial: %s (%s)", bindings.right_name, describe_profile(bindings.right))
        for source in (HidrawDialSource(), EvdevDialSource()):
            result = source.probe()
            logger.debug(
                "probe %s: available=%s reason=%s path=%s identifiers=%s",
                source.name,
                result.available,
                result.reason,
                result.path,
                result.identifiers,
            )
        logger.debug("backlight: %s", find_backlight())
    except Exception:
        return


def acquire_single_instance_lock() -> bool:
    """Ensure only one daemon reads the dials and owns the virtual device."""

    global _instance_lock_fh

    try:
        import fcntl
    except ImportError:
        return True

    lock_path = lock_file_path()
    with suppress(OSError):
        lock_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        fh = open(lock_path, "a+")
    except OSError as exc:
        logger.warning("Cannot open lock file %s: %s; continuing without it", lock_path, exc)
        return True

    try:
        fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except OSError:
        fh.close()
        return False

    fh.seek(0)
    fh.truncate()
    fh.write(f"pid={os.getpid()}\n")
    fh.flush()
    _instance_lock_fh = fh
    return True


def acquire_single_instance_or_exit() -> None:
    """Acquire the single-instance lock or exit with code 0."""

    if acquire_single_instance_lock():
        return

    logger.error("zonedial is already running (lock held). Not starting a second instance.")
    sys.exit(0)
