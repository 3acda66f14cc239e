"""Dial event sources (raw hidraw reports, or an evdev relative-axis device)."""

from __future__ import annotations

from .base import DialEventSource, GrabFailed, ProbeResult, SourceDisconnected
from .evdev_input import EvdevDialSource, decode_event
from .hidraw import HidrawDialSource, decode_report
from .registry import AutoDialSource, select_source

__all__ = [
    "AutoDialSource",
    "DialEventSource",
    "EvdevDialSource",
    "GrabFailed",
    "HidrawDialSource",
    "ProbeResult",
    "SourceDisconnected",
    "decode_event",
    "decode_report",
    "select_source",
]
