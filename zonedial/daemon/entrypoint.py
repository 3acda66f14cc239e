"""Daemon startup entrypoint.

Owns the startup sequence (arguments, logging, settings, single-instance lock,
virtual device) and then runs the dial session loop until a signal arrives.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Optional, Sequence

from zonedial.core.actions import UnknownActionError
from zonedial.core.backlight import BacklightController
from zonedial.core.config import load_settings
from zonedial.core.dispatch import ActionDispatcher
from zonedial.core.sources import select_source
from zonedial.core.uinput import VirtualDeviceError, VirtualOutputDevice

from .session import SessionLoop
from .startup import (
    acquire_single_instance_or_exit,
    build_arg_parser,
    configure_logging,
    log_startup_diagnostics_if_debug,
)
from .startup.bootstrap import format_action_catalog

logger = logging.getLogger(__name__)

EXIT_FATAL = 1
EXIT_CONFIG = 2


def _install_signal_handlers(loop: SessionLoop) -> None:
    def _handle(signum, _frame):
        logger.info("Received %s, stopping", signal.Signals(signum).name)
        loop.stop()

    signal.signal(signal.SIGTERM, _handle)
    signal.signal(signal.SIGINT, _handle)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_arg_parser().parse_args(argv)

    if args.list_actions:
        print(format_action_catalog())
        sys.exit(0)

    output: Optional[VirtualOutputDevice] = None
    try:
        configure_logging(debug=args.debug)

        try:
            settings = load_settings(
                {
                    "left": args.left,
                    "right": args.right,
                    "source": args.source,
                    "device_name": args.device_name,
                }
            )
            bindings = settings.bindings()
        except (UnknownActionError, ValueError) as exc:
            logger.error("Invalid configuration: %s", exc)
            sys.exit(EXIT_CONFIG)

        logger.info("zonedial starting. Left: %s  Right: %s", bindings.left_name, bindings.right_name)
        log_startup_diagnostics_if_debug(bindings)
        acquire_single_instance_or_exit()

        try:
            output = VirtualOutputDevice.create()
        except VirtualDeviceError as exc:
            logger.error("%s", exc)
            sys.exit(EXIT_FATAL)

        source = select_source(requested=settings.source, device_name=settings.device_name)
        loop = SessionLoop(source, ActionDispatcher(bindings, output, BacklightController()), settings)
        _install_signal_handlers(loop)
        loop.run()

    except KeyboardInterrupt:
        logger.info("Shutting down...")
        sys.exit(0)
    except Exception as exc:
        logger.exception("Unhandled error: %s", exc)
        sys.exit(EXIT_FATAL)
    finally:
        if output is not None:
            output.close()
