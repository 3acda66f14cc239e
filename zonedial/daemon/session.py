"""Dial session loop.

One loop owns the device lifecycle:

    SEARCHING -> CONNECTED -> POLLING
        ^            |           |
        +------------+-----------+   (any failure)

Nothing here ends the process. Device absence, read timeouts and empty reads
are expected; I/O errors and grab contention are logged and retried.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Optional

from ..core.config import DaemonSettings
from ..core.dispatch import ActionDispatcher
from ..core.logging_utils import log_throttled, reset_throttle
from ..core.sources import DialEventSource, GrabFailed
from ..core.utils.exceptions import describe_os_error, is_device_disconnected, is_permission_denied

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    SEARCHING = "searching"
    CONNECTED = "connected"
    POLLING = "polling"


class SessionLoop:
    def __init__(
        self,
        source: DialEventSource,
        dispatcher: ActionDispatcher,
        settings: Optional[DaemonSettings] = None,
        *,
        sleep: Optional[Callable[[float], object]] = None,
    ):
        self.source = source
        self.dispatcher = dispatcher
        self.settings = settings if settings is not None else DaemonSettings()
        self.state = SessionState.SEARCHING
        self.path: Optional[str] = None
        self._stop = threading.Event()
        self._sleep = sleep if sleep is not None else self._stop.wait
        self._grab_backoff_s = self.settings.grab_retry_s
        self._announced_searching = False

    @property
    def grab_backoff_s(self) -> float:
        return self._grab_backoff_s

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        self._stop.set()

    def run(self) -> None:
        logger.info("Dial session started (source=%s)", getattr(self.source, "name", "?"))
        try:
            while not self._stop.is_set():
                self.step()
        finally:
            self.source.close()
            logger.info("Dial session stopped")

    def step(self) -> None:
        """Perform exactly one state transition."""

        if self.state is SessionState.SEARCHING:
            self._search()
        elif self.state is SessionState.CONNECTED:
            self._connect()
        else:
            self._poll()

    def _transition(self, state: SessionState) -> None:
        if state is not self.state:
            logger.debug("session: %s -> %s", self.state.value, state.value)
        self.state = state

    def _search(self) -> None:
        path = self.source.locate()
        if path is None:
            if not self._announced_searching:
                logger.info("Waiting for dial device...")
                self._announced_searching = True
            self._sleep(self.settings.search_interval_s)
            return

        self._announced_searching = False
        self.path = path
        self._transition(SessionState.CONNECTED)

    def _connect(self) -> None:
        path = self.path
        if path is None:
            self._transition(SessionState.SEARCHING)
            return

        try:
            self.source.open(path)
        except GrabFailed as exc:
            self.source.close()
            log_throttled(
                logger,
                f"session.grab.{path}",
                interval_s=60.0,
                level=logging.WARNING,
                msg="Could not grab %s (%s); retrying in %.1fs",
                args=(path, describe_os_error(exc), self._grab_backoff_s),
            )
            self._sleep(self._grab_backoff_s)
            self._grab_backoff_s = min(self._grab_backoff_s * 2, self.settings.grab_retry_max_s)
            self._transition(SessionState.SEARCHING)
            return
        except OSError as exc:
            self.source.close()
            hint = " (check udev rule / input group)" if is_permission_denied(exc) else ""
            log_throttled(
                logger,
                f"session.open.{path}",
                interval_s=60.0,
                level=logging.WARNING,
                msg="Could not open %s: %s%s",
                args=(path, exc, hint),
            )
            self._sleep(self.settings.reconnect_delay_s)
            self._transition(SessionState.SEARCHING)
            return

        self._grab_backoff_s = self.settings.grab_retry_s
        reset_throttle(f"session.grab.{path}")
        logger.info("Monitoring %s", path)
        self._transition(SessionState.POLLING)

    def _poll(self) -> None:
        try:
            events = list(self.source.read_events(self.settings.poll_timeout_s))
        except OSError as exc:
            if is_device_disconnected(exc):
                logger.info("Dial device %s disconnected", self.path)
            else:
                log_throttled(
                    logger,
                    "session.read",
                    interval_s=30.0,
                    level=logging.WARNING,
                    msg="Read from %s failed (%s): %s",
                    args=(self.path, describe_os_error(exc), exc),
                )
            self._drop_connection()
            return
        except Exception as exc:
            log_throttled(
                logger,
                "session.read.unexpected",
                interval_s=30.0,
                level=logging.ERROR,
                msg="Unexpected error reading %s",
                args=(self.path,),
                exc=exc,
            )
            self._drop_connection()
            return

        for event in events:
            self.dispatcher.dispatch(event.identity, event.direction)

    def _drop_connection(self) -> None:
        self.source.close()
        self.path = None
        self._sleep(self.settings.reconnect_delay_s)
        self._transition(SessionState.SEARCHING)
