from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol

from ..actions import DialTurnEvent


class SourceDisconnected(OSError):
    """The open device node went away (or stopped answering)."""


class GrabFailed(OSError):
    """Exclusive access could not be acquired; another process holds the device."""


@dataclass(frozen=True)
class ProbeResult:
    """Result of probing an event source on this system.

    `available` is True only when a matching device node is present right now.
    """

    available: bool
    reason: str = ""
    path: Optional[str] = None
    identifiers: dict[str, str] = field(default_factory=dict)


class DialEventSource(Protocol):
    """One way the dials are exposed by the kernel.

    The session loop drives any source through the same cycle:
    locate -> open -> read_events (repeatedly) -> close.
    """

    name: str
    requires_grab: bool

    def locate(self) -> Optional[str]: ...

    def open(self, path: str) -> None: ...

    def read_events(self, timeout_s: float) -> Iterable[DialTurnEvent]: ...

    def close(self) -> None: ...

    @property
    def is_open(self) -> bool: ...
