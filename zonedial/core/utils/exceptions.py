from __future__ import annotations

import errno as _errno


def is_device_disconnected(exc: BaseException) -> bool:
    """Best-effort check for a disappeared device node.

    hidraw and evdev report unplug differently: ENODEV on read, ENOENT on
    reopen, or an OSError carrying only a message.
    """

    code = getattr(exc, "errno", None)
    if code in (_errno.ENODEV, _errno.ENOENT, _errno.ENXIO):
        return True

    try:
        msg = str(exc)
    except Exception:
        return False

    return "No such device" in msg or "Disconnected" in msg


def is_device_busy(exc: BaseException) -> bool:
    """Best-effort check for transient 'busy' errors (e.g. another grab)."""

    code = getattr(exc, "errno", None)
    if code == _errno.EBUSY:
        return True

    try:
        msg = str(exc)
    except Exception:
        return False

    return "Device or resource busy" in msg


def is_permission_denied(exc: BaseException) -> bool:
    """Best-effort check for permission failures.

    Typically means the udev rule for the hidraw node or the `input` group
    membership is missing.
    """

    if isinstance(exc, PermissionError):
        return True

    code = getattr(exc, "errno", None)
    if code in (_errno.EPERM, _errno.EACCES):
        return True

    try:
        msg = str(exc).lower()
    except Exception:
        return False

    return "permission denied" in msg or "not permitted" in msg


def describe_os_error(exc: BaseException) -> str:
    """Short human label used in recoverable-error log lines."""

    if is_device_disconnected(exc):
        return "device disconnected"
    if is_device_busy(exc):
        return "device busy"
    if is_permission_denied(exc):
        return "permission denied"
    return "I/O error"
