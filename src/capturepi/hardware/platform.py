"""Board kinds and the platform capabilities built for each of them."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..sensors.accelerometer import AccelerometerMock
from ..sensors.base import Sensor

logger = logging.getLogger(__name__)

KeypadCallback = Callable[[str], None]


class BoardKind(enum.Enum):
    MOCK = "mock"
    UDOO_NEO = "udoo_neo"

    @classmethod
    def parse(cls, value: "str | BoardKind") -> "BoardKind":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_")
        for kind in cls:
            if kind.value == key:
                return kind
        raise UnknownBoardError(f"Unknown board kind {value!r}")


class UnknownBoardError(ValueError):
    """Raised when no platform builder is registered for a board kind."""


@dataclass
class Platform:
    """
    Hardware capabilities the capture controller relies on.

    Each capability is a plain callable so boards can be assembled from
    whatever drives their GPIO lines.
    """

    set_sync_light: Callable[[bool], None]
    set_buzzer: Callable[[bool], None]
    sensors: List[Sensor] = field(default_factory=list)
    keypad_callback: Optional[KeypadCallback] = None

    def get_sensors(self) -> List[Sensor]:
        return list(self.sensors)

    def set_keypad_callback(self, callback: Optional[KeypadCallback]) -> None:
        self.keypad_callback = callback
        logger.info("Set keypad callback.")

    def press_key(self, key: str) -> None:
        """Deliver a key press as the keypad driver would."""
        callback = self.keypad_callback
        if callback is None:
            logger.debug("Key %r pressed with no keypad callback set", key)
            return
        callback(key)


class GPIOPort:
    """A sysfs GPIO output line such as ``/sys/class/gpio/gpio4``."""

    def __init__(self, name: str, root: Path = Path("/sys/class/gpio")) -> None:
        self.name = name
        self.path = root / name

    def set_value(self, state: bool) -> None:
        try:
            (self.path / "value").write_text("1" if state else "0", encoding="ascii")
        except OSError as exc:
            raise IOError(f"Could not set {self.name}: {exc}") from exc


# ------------------------------------------------------------------ builders
def _log_state(label: str) -> Callable[[bool], None]:
    def _apply(state: bool) -> None:
        logger.info("%s %s.", "Enabled" if state else "Disabled", label)

    return _apply


def build_mock_platform() -> Platform:
    return Platform(
        set_sync_light=_log_state("synchronization light"),
        set_buzzer=_log_state("buzzer"),
        sensors=[AccelerometerMock("Accelerometer")],
    )


def build_udoo_neo_platform(gpio_root: Path = Path("/sys/class/gpio")) -> Platform:
    light = GPIOPort("gpio4", gpio_root)
    buzzer = GPIOPort("gpio5", gpio_root)
    return Platform(
        set_sync_light=light.set_value,
        set_buzzer=buzzer.set_value,
        sensors=[AccelerometerMock("Accelerometer")],
    )


BOARD_BUILDERS: Dict[BoardKind, Callable[[], Platform]] = {
    BoardKind.MOCK: build_mock_platform,
    BoardKind.UDOO_NEO: build_udoo_neo_platform,
}


def build_platform(board: "str | BoardKind") -> Platform:
    """Build the :class:`Platform` registered for ``board``."""
    kind = BoardKind.parse(board)
    builder = BOARD_BUILDERS.get(kind)
    if builder is None:
        raise UnknownBoardError(f"No platform builder registered for {kind.value!r}")
    logger.info("Building platform for: %s.", kind.value)
    return builder()
