from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from ..actions import DialTurnEvent
from .base import DialEventSource, SourceDisconnected
from .evdev_input import DEFAULT_DIAL_DEVICE_NAME, EvdevDialSource
from .hidraw import HidrawDialSource

logger = logging.getLogger(__name__)

SOURCE_NAMES: tuple[str, ...] = ("auto", "hidraw", "evdev")


@dataclass(frozen=True)
class SourceSpec:
    name: str
    factory: Callable[..., DialEventSource]


def _default_specs() -> list[SourceSpec]:
    # hidraw first: it needs no grab and works without the platform driver.
    return [
        SourceSpec(name="hidraw", factory=lambda **_kw: HidrawDialSource()),
        SourceSpec(name="evdev", factory=lambda **kw: EvdevDialSource(**kw)),
    ]


class AutoDialSource:
    """Try each source in order on every locate; delegate to whichever matched.

    Which interface shows up depends on the driver that is loaded at the
    moment, and that can change between disconnects.
    """

    name = "auto"

    def __init__(self, sources: Iterable[DialEventSource]):
        self._sources = list(sources)
        self._candidates: dict[str, DialEventSource] = {}
        self._active: Optional[DialEventSource] = None

    @property
    def requires_grab(self) -> bool:
        return bool(self._active is not None and self._active.requires_grab)

    @property
    def is_open(self) -> bool:
        return bool(self._active is not None and self._active.is_open)

    def locate(self) -> Optional[str]:
        self._candidates.clear()
        for source in self._sources:
            path = source.locate()
            if path is not None:
                self._candidates[path] = source
                return path
        return None

    def open(self, path: str) -> None:
        source = self._candidates.get(path)
        if source is None:
            raise SourceDisconnected(f"no source located {path}")
        self._active = source
        source.open(path)

    def read_events(self, timeout_s: float) -> Iterable[DialTurnEvent]:
        if self._active is None:
            raise SourceDisconnected("auto source is not open")
        return self._active.read_events(timeout_s)

    def close(self) -> None:
        active, self._active = self._active, None
        if active is not None:
            active.close()


def select_source(
    *,
    requested: Optional[str] = None,
    device_name: str = DEFAULT_DIAL_DEVICE_NAME,
    specs: Optional[Iterable[SourceSpec]] = None,
) -> DialEventSource:
    """Build the event source to drive.

    Order of precedence:
    - explicit `requested`
    - env `ZONEDIAL_SOURCE`
    - `auto`

    Raises ValueError for a name that is not a known source.
    """

    req = (requested or os.environ.get("ZONEDIAL_SOURCE") or "auto").strip().lower()
    spec_list = list(specs) if specs is not None else _default_specs()

    if req == "auto":
        logger.debug("Event source: auto (%s)", ", ".join(s.name for s in spec_list))
        return AutoDialSource(spec.factory(device_name=device_name) for spec in spec_list)

    for spec in spec_list:
        if spec.name == req:
            logger.debug("Event source '%s' selected (requested).", spec.name)
            return spec.factory(device_name=device_name)

    raise ValueError(f"unknown event source {req!r} (choose from: {', '.join(SOURCE_NAMES)})")
