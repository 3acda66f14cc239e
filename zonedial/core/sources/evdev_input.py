"""evdev relative-axis source (/dev/input/eventN).

When the platform driver is loaded, the dials show up as a regular input
device reporting REL_WHEEL (left) and REL_HWHEEL (right). The device is
grabbed so the desktop does not also see the raw wheel motion.
"""

from __future__ import annotations

import logging
import select
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

import evdev
from evdev import ecodes

from .. import sysfs
from ..actions import DialIdentity, DialTurnEvent, RotationDirection
from ..uinput import DEFAULT_DEVICE_NAME
from .base import GrabFailed, ProbeResult, SourceDisconnected

logger = logging.getLogger(__name__)

DEFAULT_DIAL_DEVICE_NAME = "zotac zone dial"

AXIS_TO_DIAL: dict[int, DialIdentity] = {
    ecodes.REL_WHEEL: DialIdentity.LEFT,
    ecodes.REL_HWHEEL: DialIdentity.RIGHT,
}


def decode_event(event: Any) -> Optional[DialTurnEvent]:
    """Decode one evdev event; None unless it is a dial axis movement.

    Only the sign of the value is used: one event is one turn, however many
    detents the kernel folded into it.
    """

    if getattr(event, "type", None) != ecodes.EV_REL:
        return None
    identity = AXIS_TO_DIAL.get(getattr(event, "code", None))
    if identity is None:
        return None
    try:
        direction = RotationDirection.from_value(int(event.value))
    except (TypeError, ValueError):
        return None
    if direction is None:
        return None
    return DialTurnEvent(identity, direction)


def _list_input_devices() -> list[str]:
    return list(evdev.list_devices(str(sysfs.dev_root() / "input")))


def find_input_device(
    name_substring: str = DEFAULT_DIAL_DEVICE_NAME,
    *,
    lister: Callable[[], Iterable[str]] = _list_input_devices,
    device_factory: Callable[[str], Any] = evdev.InputDevice,
) -> Optional[str]:
    """Return the first event node (sorted by path) whose name matches."""

    needle = name_substring.strip().lower()
    try:
        paths = sorted(lister())
    except OSError:
        return None

    for path in paths:
        try:
            dev = device_factory(path)
        except OSError:
            continue
        try:
            name = str(getattr(dev, "name", "") or "")
        finally:
            try:
                dev.close()
            except OSError:
                pass
        # Never pick up our own virtual output device.
        if name == DEFAULT_DEVICE_NAME:
            continue
        if needle and needle in name.lower():
            return path
    return None


@dataclass
class EvdevDialSource:
    name: str = "evdev"
    requires_grab: bool = True
    device_name: str = DEFAULT_DIAL_DEVICE_NAME
    device_factory: Callable[[str], Any] = field(default=evdev.InputDevice, repr=False)
    lister: Callable[[], Iterable[str]] = field(default=_list_input_devices, repr=False)
    selector: Callable[..., Any] = field(default=select.select, repr=False)

    _dev: Any = field(default=None, init=False, repr=False)

    def locate(self) -> Optional[str]:
        return find_input_device(self.device_name, lister=self.lister, device_factory=self.device_factory)

    def probe(self) -> ProbeResult:
        path = self.locate()
        if path is None:
            return ProbeResult(available=False, reason=f"no input device named like {self.device_name!r}")
        return ProbeResult(available=True, reason="input device present", path=path, identifiers={"name": self.device_name})

    @property
    def is_open(self) -> bool:
        return self._dev is not None

    def open(self, path: str) -> None:
        self.close()
        dev = self.device_factory(path)
        try:
            dev.grab()
        except OSError as exc:
            try:
                dev.close()
            except OSError:
                pass
            raise GrabFailed(exc.errno, f"cannot grab {path}: {exc.strerror or exc}") from exc
        self._dev = dev

    def read_events(self, timeout_s: float) -> list[DialTurnEvent]:
        if self._dev is None:
            raise SourceDisconnected("evdev source is not open")

        # A read failure is what signals unplug here; the timeout only keeps
        # shutdown responsive.
        readable, _, _ = self.selector([self._dev], [], [], timeout_s)
        if not readable:
            return []

        try:
            raw = list(self._dev.read())
        except BlockingIOError:
            return []

        out: list[DialTurnEvent] = []
        for event in raw:
            decoded = decode_event(event)
            if decoded is not None:
                out.append(decoded)
        return out

    def close(self) -> None:
        dev, self._dev = self._dev, None
        if dev is None:
            return
        try:
            dev.ungrab()
        except OSError:
            # Already gone; the kernel drops the grab with the fd.
            pass
        try:
            dev.close()
        except OSError as exc:
            logger.debug("evdev close failed: %s", exc)
