"""Hardware abstraction for the field device.

:mod:`platform` resolves a :class:`BoardKind` to a :class:`Platform` through
an explicit builder registry; :mod:`interface` wraps a platform with sensor
bindings, keypad handling, and fire-and-forget light/buzzer sequences.
"""

from .interface import HardwareInterface
from .platform import (
    BOARD_BUILDERS,
    BoardKind,
    GPIOPort,
    Platform,
    UnknownBoardError,
    build_platform,
)

__all__ = [
    "BOARD_BUILDERS",
    "BoardKind",
    "GPIOPort",
    "HardwareInterface",
    "Platform",
    "UnknownBoardError",
    "build_platform",
]
