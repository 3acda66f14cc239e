"""`python -m zonedial.daemon` entrypoint.

For installed usage, prefer the `zonedial` console script.
"""

from __future__ import annotations

from .entrypoint import main


if __name__ == "__main__":
    main()
