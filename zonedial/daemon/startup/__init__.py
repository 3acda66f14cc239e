from __future__ import annotations

from .bootstrap import (
    acquire_single_instance_or_exit,
    build_arg_parser,
    configure_logging,
    log_startup_diagnostics_if_debug,
)

__all__ = [
    "acquire_single_instance_or_exit",
    "build_arg_parser",
    "configure_logging",
    "log_startup_diagnostics_if_debug",
]
