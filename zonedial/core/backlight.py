"""Display backlight control through /sys/class/backlight.

Brightness control is best-effort: a missing panel or a failed write is
logged and ignored, never raised to the dial loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import sysfs
from .actions import RotationDirection
from .logging_utils import log_throttled

logger = logging.getLogger(__name__)

# Preferred when several panels are exposed (hybrid graphics).
GPU_VENDOR_MARKERS: tuple[str, ...] = ("amdgpu",)


def find_backlight(root: Optional[Path] = None) -> Optional[Path]:
    """Return the backlight directory to drive, or None.

    Resolved on every call: the panel's sysfs name can change across reboots
    or after a GPU re-enumerates.
    """

    base = root if root is not None else sysfs.backlight_root()
    try:
        candidates = sorted(
            (p for p in base.iterdir() if (p / "brightness").exists() and (p / "max_brightness").exists()),
            key=lambda p: p.name,
        )
    except OSError:
        return None

    if not candidates:
        return None

    for marker in GPU_VENDOR_MARKERS:
        for path in candidates:
            if marker in path.name.lower():
                return path
    return candidates[0]


def compute_brightness(current: int, max_value: int, direction: RotationDirection, step_percent: float) -> int:
    # Halves round up: 5% of a 50-step panel is 3, not 2.
    step = max(1, int(max_value * (float(step_percent) / 100.0) + 0.5))
    return max(0, min(int(current) + step * direction.sign, int(max_value)))


@dataclass
class BacklightController:
    root: Optional[Path] = None

    def adjust(self, direction: RotationDirection, step_percent: float) -> Optional[int]:
        """Step the panel brightness; return the value written or None."""

        path = find_backlight(self.root)
        if path is None:
            log_throttled(
                logger,
                "backlight.missing",
                interval_s=60.0,
                level=logging.WARNING,
                msg="No display backlight found; ignoring brightness dial",
            )
            return None

        try:
            max_value = sysfs.read_int(path / "max_brightness")
            current = sysfs.read_int(path / "brightness")
        except (OSError, ValueError) as exc:
            log_throttled(
                logger,
                "backlight.read",
                interval_s=30.0,
                level=logging.WARNING,
                msg="Backlight read failed for %s: %s",
                args=(path, exc),
            )
            return None

        new_value = compute_brightness(current, max_value, direction, step_percent)
        try:
            sysfs.write_int(path / "brightness", new_value)
        except OSError as exc:
            log_throttled(
                logger,
                "backlight.write",
                interval_s=30.0,
                level=logging.WARNING,
                msg="Backlight write failed for %s: %s",
                args=(path, exc),
            )
            return None

        logger.debug("backlight %s: %s -> %s (max %s)", path.name, current, new_value, max_value)
        return new_value
