from __future__ import annotations

import logging
import os
from typing import Optional, Protocol

from .actions import Backlight, DialBindings, DialIdentity, KeyPair, RelativeAxis, RotationDirection
from .logging_utils import log_throttled
from .utils.exceptions import describe_os_error

logger = logging.getLogger(__name__)


class OutputDevice(Protocol):
    def emit_key(self, key: int, pressed: bool) -> None: ...

    def emit_relative(self, axis: int, amount: int) -> None: ...

    def commit(self) -> None: ...


class BacklightAdjuster(Protocol):
    def adjust(self, direction: RotationDirection, step_percent: float) -> Optional[int]: ...


class ActionDispatcher:
    """Turn a decoded dial turn into the bound host action.

    A failing action is logged and dropped; it must never end the loop.
    """

    def __init__(self, bindings: DialBindings, output: OutputDevice, backlight: BacklightAdjuster):
        self._bindings = bindings
        self._output = output
        self._backlight = backlight
        self._debug_events = os.environ.get("ZONEDIAL_DEBUG_EVENTS") == "1"

    def dispatch(self, identity: DialIdentity, direction: RotationDirection) -> None:
        profile = self._bindings.profile_for(identity)
        if self._debug_events:
            logger.info("dial %s turned %s -> %s", identity.value, direction.value, profile)

        try:
            if isinstance(profile, KeyPair):
                self._emit_key_tap(profile.key_for(direction))
            elif isinstance(profile, RelativeAxis):
                self._emit_relative(profile, direction)
            elif isinstance(profile, Backlight):
                self._backlight.adjust(direction, profile.step_percent)
        except Exception as exc:
            log_throttled(
                logger,
                f"dispatch.{identity.value}",
                interval_s=10.0,
                level=logging.WARNING,
                msg="Dial action failed (%s): %s",
                args=(describe_os_error(exc), exc),
            )

    def _emit_key_tap(self, key: int) -> None:
        self._output.emit_key(key, True)
        try:
            self._output.emit_key(key, False)
        except Exception:
            self._release_after_failure(key)
            raise
        self._output.commit()

    def _emit_relative(self, profile: RelativeAxis, direction: RotationDirection) -> None:
        amount = profile.amount_for(direction)
        if profile.modifier is None:
            self._output.emit_relative(profile.axis, amount)
            self._output.commit()
            return

        self._output.emit_key(profile.modifier, True)
        try:
            self._output.emit_relative(profile.axis, amount)
            self._output.emit_key(profile.modifier, False)
        except Exception:
            self._release_after_failure(profile.modifier)
            raise
        self._output.commit()

    def _release_after_failure(self, key: int) -> None:
        # The press already went out; the matching release must follow it.
        try:
            self._output.emit_key(key, False)
            self._output.commit()
        except Exception as exc:
            logger.debug("Releasing key %s after a failed write also failed: %s", key, exc)
