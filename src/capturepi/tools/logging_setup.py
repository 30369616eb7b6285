"""Process-wide logging configuration for the capture service."""

from __future__ import annotations

import logging
import sys

from .debug import debug_enabled

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"

_configured = False


def configure_logging(level: int | str | None = None) -> None:
    """
    Install a single stderr handler on the ``capturepi`` logger.

    Calling this more than once only updates the level.
    """
    global _configured

    if level is None:
        level = logging.DEBUG if debug_enabled() else logging.INFO
    root = logging.getLogger("capturepi")
    root.setLevel(level)
    if _configured:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _configured = True
