"""Opt-in timing of store and capture operations, switched by ``CAPTUREPI_DEBUG``."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator

logger = logging.getLogger(__name__)


def debug_enabled() -> bool:
    """Return True when ``CAPTUREPI_DEBUG`` asks for timing output."""
    return os.getenv("CAPTUREPI_DEBUG", "").lower() in {"1", "true", "yes", "on"}


@contextmanager
def time_block(label: str, *, emitter: Callable[[str], None] | None = None) -> Iterator[None]:
    """
    Log how long the wrapped block took, only while debugging is enabled.

    ``emitter`` replaces the module logger at debug level.
    """
    if not debug_enabled():
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        target = emitter or logger.debug
        target(f"{label} took {elapsed_ms:.3f} ms")
