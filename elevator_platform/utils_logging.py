from __future__ import annotations

"""Logging utilities.

Set up a consistent logging configuration to both console and a file
in the `logs/` directory. Streamlit re-executes the app script on every
interaction, so configuration happens once per process.
"""

import logging
from pathlib import Path

_CONFIGURED = False


def configure_logging(log_dir: Path, debug: bool = False) -> None:
    """Configure root logging for the application.

    - Creates the log directory if missing
    - Streams logs to both stdout and `logs/app.log`
    - Uses DEBUG level if `debug=True`, otherwise INFO
    - Subsequent calls are no-ops
    """
    global _CONFIGURED
    if _CONFIGURED:
        return
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "app.log"

    level = logging.DEBUG if debug else logging.INFO
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    logging.basicConfig(
        level=level,
        format=fmt,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_file, mode="a", encoding="utf-8"),
        ],
    )
    # httpx logs every request line at INFO, including query strings
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
    _CONFIGURED = True
