"""Explicitly constructed runtime context shared by the controller and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict
from uuid import UUID

from ..config.runtime import CaptureConfig
from ..config.system_config import SystemConfig
from ..store.base import CaptureStore

if TYPE_CHECKING:  # pragma: no cover
    from ..hardware.interface import HardwareInterface


@dataclass
class CaptureContext:
    """Everything a capture session needs, assembled once at startup."""

    config: CaptureConfig
    system_config: SystemConfig
    hardware: "HardwareInterface"
    store: CaptureStore

    def sensor_types(self) -> Dict[str, UUID]:
        """
        Snapshot of sensor name -> type UUID for a new capture.

        Names without a configured type take the type of their bound sensor;
        names with neither are left out.
        """
        types = self.system_config.get_sensor_types()
        for name, sensor in self.hardware.get_sensors().items():
            if name not in types and sensor is not None:
                types[name] = sensor.type
        return types
