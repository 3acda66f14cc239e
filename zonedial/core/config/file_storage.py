from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any


def load_config_settings(
    *,
    config_file: Path,
    defaults: dict[str, Any],
    retries: int = 3,
    retry_delay: float = 0.02,
    logger,
) -> dict[str, Any]:
    """Load config JSON merged over *defaults*.

    Retries a few times on JSONDecodeError (an editor may be mid-write). Unknown
    keys are dropped. Falls back to a copy of *defaults* when the file is
    missing or stays unreadable.
    """

    if not config_file.exists():
        return dict(defaults)

    last_error: Exception | None = None
    for _ in range(max(1, retries)):
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if not isinstance(loaded, dict):
                logger.warning("Ignoring %s: top level is not an object", config_file)
                return dict(defaults)

            unknown = sorted(k for k in loaded if k not in defaults)
            if unknown:
                logger.debug("Ignoring unknown config keys: %s", ", ".join(unknown))

            return {**defaults, **{k: v for k, v in loaded.items() if k in defaults}}
        except json.JSONDecodeError as e:
            last_error = e
            time.sleep(retry_delay)
        except OSError as e:
            last_error = e
            break

    logger.warning("Failed to load config %s (using defaults): %s", config_file, last_error)
    return dict(defaults)
