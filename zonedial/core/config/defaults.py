"""Default daemon settings."""

from __future__ import annotations

DEFAULTS: dict = {
    "left": "volume",
    "right": "brightness",
    # auto | hidraw | evdev
    "source": "auto",
    # Name substring of the evdev dial device (evdev source only).
    "device_name": "zotac zone dial",
    "search_interval_s": 3.0,
    # Read timeout; doubles as the unplug heartbeat for hidraw.
    "poll_timeout_s": 2.0,
    "reconnect_delay_s": 2.0,
    # Backoff after a failed exclusive grab: starts here, doubles up to the max.
    "grab_retry_s": 1.0,
    "grab_retry_max_s": 30.0,
}
