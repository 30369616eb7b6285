"""Debug and logging helpers shared across capturepi."""

from .debug import debug_enabled, time_block
from .logging_setup import configure_logging

__all__ = ["configure_logging", "debug_enabled", "time_block"]
