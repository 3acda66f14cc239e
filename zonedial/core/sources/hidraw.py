"""Raw HID report source (/dev/hidrawN).

The dial interface sends fixed 64-byte reports. Report 0x03 carries the dial
state; byte 3 is a trigger code naming the dial and the direction of one
detent. No exclusive access is needed: hidraw readers each get a copy.
"""

from __future__ import annotations

import logging
import os
import select
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from .. import sysfs
from ..actions import DialIdentity, DialTurnEvent, RotationDirection
from .base import ProbeResult, SourceDisconnected

logger = logging.getLogger(__name__)

DIAL_REPORT_ID = 0x03
REPORT_SIZE = 64
TRIGGER_OFFSET = 3

VENDOR_IDS: tuple[int, ...] = (0x1EE9, 0x1E19)
PRODUCT_ID = 0x1590

TRIGGER_CODES: dict[int, DialTurnEvent] = {
    0x10: DialTurnEvent(DialIdentity.LEFT, RotationDirection.COUNTER_CLOCKWISE),
    0x08: DialTurnEvent(DialIdentity.LEFT, RotationDirection.CLOCKWISE),
    0x02: DialTurnEvent(DialIdentity.RIGHT, RotationDirection.COUNTER_CLOCKWISE),
    0x01: DialTurnEvent(DialIdentity.RIGHT, RotationDirection.CLOCKWISE),
}


def decode_report(data: Optional[bytes]) -> Optional[DialTurnEvent]:
    """Decode one raw report; None for anything that is not a dial turn."""

    if not data or len(data) <= TRIGGER_OFFSET:
        return None
    if data[0] != DIAL_REPORT_ID:
        return None
    # 0x00 is the idle report; unknown codes are left for newer firmware.
    return TRIGGER_CODES.get(data[TRIGGER_OFFSET])


def parse_hid_id(uevent: str) -> Optional[tuple[int, int]]:
    """Extract (vendor, product) from a uevent `HID_ID=bus:vendor:product` line."""

    for line in uevent.splitlines():
        key, _, value = line.strip().partition("=")
        if key != "HID_ID":
            continue
        parts = value.split(":")
        if len(parts) != 3:
            return None
        try:
            return int(parts[1], 16), int(parts[2], 16)
        except ValueError:
            return None
    return None


def _matches_ids(uevent: str) -> bool:
    ids = parse_hid_id(uevent)
    if ids is not None:
        vendor, product = ids
        return vendor in VENDOR_IDS and product == PRODUCT_ID

    # Older kernels only expose HID_NAME/MODALIAS; fall back to a text match.
    upper = uevent.upper()
    return f"{PRODUCT_ID:04X}" in upper and any(f"{vid:04X}" in upper for vid in VENDOR_IDS)


def find_hidraw_node(
    *,
    sysfs_root: Optional[Path] = None,
    dev_root: Optional[Path] = None,
) -> Optional[str]:
    """Return the /dev path of the first matching hidraw node (sorted by name)."""

    root = sysfs_root if sysfs_root is not None else sysfs.hidraw_root()
    devs = dev_root if dev_root is not None else sysfs.dev_root()
    try:
        entries = sorted(root.glob("hidraw*"), key=lambda p: p.name)
    except OSError:
        return None

    for entry in entries:
        uevent = sysfs.read_text(entry / "device" / "uevent")
        if uevent is None:
            continue
        if _matches_ids(uevent):
            return str(devs / entry.name)
    return None


def _open_unbuffered(path: str):
    return open(path, "rb", buffering=0)


@dataclass
class HidrawDialSource:
    name: str = "hidraw"
    requires_grab: bool = False
    opener: Callable[[str], Any] = field(default=_open_unbuffered, repr=False)
    poller_factory: Callable[[], Any] = field(default=select.poll, repr=False)

    _fh: Any = field(default=None, init=False, repr=False)
    _poller: Any = field(default=None, init=False, repr=False)
    _path: Optional[str] = field(default=None, init=False)

    def locate(self) -> Optional[str]:
        return find_hidraw_node()

    def probe(self) -> ProbeResult:
        path = self.locate()
        if path is None:
            return ProbeResult(available=False, reason="no matching hidraw node")
        ids = ", ".join(f"{vid:04x}:{PRODUCT_ID:04x}" for vid in VENDOR_IDS)
        return ProbeResult(available=True, reason="hidraw node present", path=path, identifiers={"ids": ids})

    @property
    def is_open(self) -> bool:
        return self._fh is not None

    def open(self, path: str) -> None:
        self.close()
        fh = self.opener(path)
        try:
            poller = self.poller_factory()
            poller.register(fh.fileno(), select.POLLIN)
        except Exception:
            fh.close()
            raise
        self._fh, self._poller, self._path = fh, poller, path

    def read_events(self, timeout_s: float) -> list[DialTurnEvent]:
        if self._fh is None:
            raise SourceDisconnected("hidraw source is not open")

        ready = self._poller.poll(int(timeout_s * 1000))
        if not ready:
            # Heartbeat: a silent unplug leaves poll() idle instead of failing.
            if self._path is not None and not os.path.exists(self._path):
                raise SourceDisconnected(f"Disconnected: {self._path}")
            return []

        for _fd, mask in ready:
            if mask & (select.POLLHUP | select.POLLERR | select.POLLNVAL):
                raise SourceDisconnected(f"Disconnected: {self._path} (poll mask {mask:#x})")

        data = self._fh.read(REPORT_SIZE)
        event = decode_report(data)
        return [event] if event is not None else []

    def close(self) -> None:
        fh, self._fh, self._poller = self._fh, None, None
        if fh is None:
            return
        try:
            fh.close()
        except OSError as exc:
            logger.debug("hidraw close failed: %s", exc)
