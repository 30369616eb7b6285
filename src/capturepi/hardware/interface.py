"""Peripheral access for the capture controller: lights, buzzer, keypad, sensors."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Iterable, Optional

from ..config.system_config import SystemConfig
from ..core.signals import EndCapture, Signal, StartCapture
from ..sensors.base import Sensor
from .platform import Platform

logger = logging.getLogger(__name__)

START_KEY = "1"
END_KEY = "4"


def _spawn(name: str, target: Callable[[], None]) -> threading.Thread:
    thread = threading.Thread(target=target, name=name, daemon=True)
    thread.start()
    return thread


class HardwareInterface:
    """
    Binds configured sensor names to platform sensors and drives side effects.

    Light and buzzer sequences run on short-lived daemon threads; their
    failures are logged and never reach the caller.
    """

    def __init__(
        self,
        platform: Platform,
        config: SystemConfig,
        signal_sink: Optional[Callable[[Signal], None]] = None,
    ) -> None:
        self.platform = platform
        self.config = config
        self._signal_sink = signal_sink
        self._sensors: Dict[str, Optional[Sensor]] = {}

        for sensor in platform.get_sensors():
            config.register_sensor_uuid(sensor.serial)
            logger.info("Registered sensor, %s, of type, %s.", sensor.serial, sensor.type)
        self.update_sensor_bindings()
        config.add_config_changed_listener(self.update_sensor_bindings)
        platform.set_keypad_callback(self.key_press_listener)

    # ------------------------------------------------------------------ sensors
    def update_sensor_bindings(self) -> None:
        """Rebuild the name -> sensor map from the configured bindings."""
        available = {sensor.serial: sensor for sensor in self.platform.get_sensors()}
        bindings: Dict[str, Optional[Sensor]] = {}
        for name, serial in self.config.get_sensor_bindings().items():
            match = available.get(serial) if serial is not None else None
            if match is None:
                logger.info('Could not bind sensor "%s" to "%s".', name, serial)
            else:
                logger.info('Sensor "%s" bound to "%s"', name, serial)
            bindings[name] = match
        self._sensors = bindings

    def get_sensors(self) -> Dict[str, Optional[Sensor]]:
        return dict(self._sensors)

    def read_sample(self) -> Dict[str, str]:
        """Read every bound sensor once; unbound or failing sensors read as ``""``."""
        values: Dict[str, str] = {}
        for name, sensor in self._sensors.items():
            if sensor is None:
                values[name] = ""
                continue
            try:
                values[name] = sensor.read_sample()
            except Exception:
                logger.exception('Reading sensor "%s" failed', name)
                values[name] = ""
        return values

    # ------------------------------------------------------------------ side effects
    def flash_sync_light(self, durations_ms: Iterable[int]) -> threading.Thread:
        """Toggle the sync light, waiting each duration in turn; always ends off."""
        durations = list(durations_ms)
        light = self.platform.set_sync_light

        def _task() -> None:
            try:
                state = False
                light(False)
                for wait in durations:
                    state = not state
                    light(state)
                    time.sleep(wait / 1000.0)
                light(False)
            except Exception:
                logger.exception("Exception while flashing sync light.")

        return _spawn("syncLight", _task)

    def sound_buzzer(self, duration_ms: int) -> threading.Thread:
        buzzer = self.platform.set_buzzer

        def _task() -> None:
            try:
                buzzer(True)
                time.sleep(duration_ms / 1000.0)
                buzzer(False)
            except Exception:
                logger.exception("Exception while sounding buzzer.")

        return _spawn("Buzzer", _task)

    # ------------------------------------------------------------------ keypad
    def set_signal_sink(self, sink: Optional[Callable[[Signal], None]]) -> None:
        self._signal_sink = sink

    def key_press_listener(self, key: str) -> None:
        sink = self._signal_sink
        if sink is None:
            logger.debug("Ignoring key %r: no signal sink attached", key)
            return

        def _log_result(message: str) -> None:
            logger.debug('Result of "%s" key pressed: %s', key, message)

        if key == START_KEY:
            sink(StartCapture(_log_result))
        elif key == END_KEY:
            sink(EndCapture(_log_result))
