"""Configuration objects and helpers for capturepi.

This package knows how to load/save the YAML descriptors of a field device:
- ``capturepi.yaml`` with sampling, board, and store settings (:mod:`runtime`)
- ``system.yaml`` with the sensor names, bindings, and types
  (:mod:`system_config`)
"""

from .runtime import CaptureConfig, StoreConfig, config_from_mapping, load_config
from .system_config import SensorEntry, SystemConfig

__all__ = [
    "CaptureConfig",
    "StoreConfig",
    "SensorEntry",
    "SystemConfig",
    "config_from_mapping",
    "load_config",
]
