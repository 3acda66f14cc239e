"""Resolved daemon settings.

Layering, lowest precedence first: DEFAULTS, config.json, environment, CLI.
The result is frozen: bindings never change while the daemon runs.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from ..actions import DialBindings
from .defaults import DEFAULTS
from .file_storage import load_config_settings
from .paths import config_file_path

logger = logging.getLogger(__name__)

_SOURCES = ("auto", "hidraw", "evdev")


def _float_setting(raw: Mapping[str, Any], key: str, *, min_v: float) -> float:
    try:
        v = float(raw.get(key, DEFAULTS[key]))
    except (TypeError, ValueError):
        logger.warning("Invalid %s=%r; using %s", key, raw.get(key), DEFAULTS[key])
        v = float(DEFAULTS[key])
    return max(float(min_v), v)


def _str_setting(raw: Mapping[str, Any], key: str) -> str:
    v = raw.get(key)
    if v is None or not str(v).strip():
        return str(DEFAULTS[key])
    return str(v).strip()


@dataclass(frozen=True)
class DaemonSettings:
    left: str = DEFAULTS["left"]
    right: str = DEFAULTS["right"]
    source: str = DEFAULTS["source"]
    device_name: str = DEFAULTS["device_name"]
    search_interval_s: float = DEFAULTS["search_interval_s"]
    poll_timeout_s: float = DEFAULTS["poll_timeout_s"]
    reconnect_delay_s: float = DEFAULTS["reconnect_delay_s"]
    grab_retry_s: float = DEFAULTS["grab_retry_s"]
    grab_retry_max_s: float = DEFAULTS["grab_retry_max_s"]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "DaemonSettings":
        source = _str_setting(raw, "source").lower()
        if source not in _SOURCES:
            raise ValueError(f"unknown event source {source!r} (choose from: {', '.join(_SOURCES)})")

        grab_retry_s = _float_setting(raw, "grab_retry_s", min_v=0.1)
        return cls(
            left=_str_setting(raw, "left"),
            right=_str_setting(raw, "right"),
            source=source,
            device_name=_str_setting(raw, "device_name"),
            search_interval_s=_float_setting(raw, "search_interval_s", min_v=0.1),
            poll_timeout_s=_float_setting(raw, "poll_timeout_s", min_v=0.05),
            reconnect_delay_s=_float_setting(raw, "reconnect_delay_s", min_v=0.0),
            grab_retry_s=grab_retry_s,
            grab_retry_max_s=max(grab_retry_s, _float_setting(raw, "grab_retry_max_s", min_v=0.1)),
        )

    def bindings(self) -> DialBindings:
        """Resolve action names; raises UnknownActionError for bad names."""

        return DialBindings.from_names(self.left, self.right)


def load_settings(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    config_file: Optional[Path] = None,
) -> DaemonSettings:
    raw = load_config_settings(
        config_file=config_file if config_file is not None else config_file_path(),
        defaults=DEFAULTS,
        logger=logger,
    )

    env_source = os.environ.get("ZONEDIAL_SOURCE")
    if env_source:
        raw["source"] = env_source

    for key, value in (overrides or {}).items():
        # argparse leaves unset options as None.
        if value is not None and key in DEFAULTS:
            raw[key] = value

    return DaemonSettings.from_mapping(raw)
