from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from evdev import UInput, ecodes

from .actions import catalog_capabilities

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_NAME = "Zotac-Zone-Dials"


class VirtualDeviceError(RuntimeError):
    """The OS refused to create the synthetic input device (startup-fatal)."""


class VirtualOutputDevice:
    """Synthetic uinput device the dial actions are emitted through.

    Created once per process. Recreating it would make the compositor drop
    and re-add the device, losing any per-device configuration.
    """

    def __init__(self, ui: Any):
        self._ui = ui

    @classmethod
    def create(
        cls,
        *,
        name: str = DEFAULT_DEVICE_NAME,
        capabilities: Optional[dict[int, list[int]]] = None,
        factory: Callable[..., Any] = UInput,
    ) -> "VirtualOutputDevice":
        caps = capabilities if capabilities is not None else catalog_capabilities()
        try:
            ui = factory(caps, name=name)
        except Exception as exc:
            # uinput missing, or /dev/uinput not writable by this user.
            raise VirtualDeviceError(f"cannot create uinput device {name!r}: {exc}") from exc

        logger.info("Virtual input device %r ready (%s)", name, getattr(ui, "device", None) or "uinput")
        return cls(ui)

    def emit_key(self, key: int, pressed: bool) -> None:
        self._ui.write(ecodes.EV_KEY, int(key), 1 if pressed else 0)

    def emit_relative(self, axis: int, amount: int) -> None:
        self._ui.write(ecodes.EV_REL, int(axis), int(amount))

    def commit(self) -> None:
        self._ui.syn()

    def close(self) -> None:
        try:
            self._ui.close()
        except OSError as exc:
            logger.debug("uinput close failed: %s", exc)
