"""Sensor naming and binding configuration (``system.yaml``)."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional
from uuid import UUID

import yaml

logger = logging.getLogger(__name__)


@dataclass
class SensorEntry:
    """A named sensor slot bound to a physical sensor serial and a type."""

    name: str
    binding: Optional[UUID] = None
    type: Optional[UUID] = None

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "binding": None if self.binding is None else str(self.binding),
            "type": None if self.type is None else str(self.type),
        }


def _as_uuid(value: Any) -> Optional[UUID]:
    if value in (None, ""):
        return None
    try:
        return UUID(str(value))
    except ValueError:
        logger.warning("Ignoring malformed UUID %r in system config", value)
        return None


@dataclass
class SystemConfig:
    """
    Names of the sensors this system records and what each name is bound to.

    Shape of ``system.yaml``::

        system_uuid: 5f0c...
        sensors:
          Front Fork:
            binding: 0c39...   # serial of the physical sensor
            type: fe3c...      # sensor type UUID
        known_serials:         # sensors seen attached, available for binding
          - 0c39...
    """

    system_uuid: UUID = field(default_factory=uuid.uuid4)
    sensors: Dict[str, SensorEntry] = field(default_factory=dict)
    path: Optional[Path] = None
    known_serials: List[UUID] = field(default_factory=list)
    _listeners: List[Callable[[], None]] = field(default_factory=list, repr=False, compare=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    # ------------------------------------------------------------------ loading
    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None, path: Optional[Path] = None) -> "SystemConfig":
        payload: Mapping[str, Any] = data if isinstance(data, Mapping) else {}
        system_uuid = _as_uuid(payload.get("system_uuid")) or uuid.uuid4()
        sensors: Dict[str, SensorEntry] = {}
        block = payload.get("sensors")
        if isinstance(block, Mapping):
            for name, cfg in block.items():
                cfg = cfg if isinstance(cfg, Mapping) else {}
                sensors[str(name)] = SensorEntry(
                    name=str(name),
                    binding=_as_uuid(cfg.get("binding")),
                    type=_as_uuid(cfg.get("type")),
                )
        known: List[UUID] = []
        serials = payload.get("known_serials")
        if isinstance(serials, list):
            known = [u for u in map(_as_uuid, serials) if u is not None]
        return cls(system_uuid=system_uuid, sensors=sensors, path=path, known_serials=known)

    @classmethod
    def load(cls, path: str | Path) -> "SystemConfig":
        """Load ``path``; a missing file yields an empty config bound to ``path``."""
        path = Path(path).expanduser()
        raw: Any = {}
        if path.exists():
            with path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
        else:
            logger.info("No system config at %s, starting empty", path)
        return cls.from_mapping(raw, path=path)

    def initialized_from_file(self) -> bool:
        return self.path is not None and self.path.exists()

    def to_mapping(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "system_uuid": str(self.system_uuid),
                "sensors": {name: entry.to_mapping() for name, entry in self.sensors.items()},
                "known_serials": [str(serial) for serial in self.known_serials],
            }

    def save(self, path: str | Path | None = None) -> None:
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("No path to save the system config to.")
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as fh:
            yaml.safe_dump(self.to_mapping(), fh, default_flow_style=False, sort_keys=False)

    # ------------------------------------------------------------------ queries
    def get_sensor_names(self) -> List[str]:
        with self._lock:
            return list(self.sensors)

    def get_sensor_bindings(self) -> Dict[str, Optional[UUID]]:
        with self._lock:
            return {name: entry.binding for name, entry in self.sensors.items()}

    def get_sensor_types(self) -> Dict[str, UUID]:
        """Return name -> type UUID for every sensor with a known type."""
        with self._lock:
            return {name: entry.type for name, entry in self.sensors.items() if entry.type is not None}

    # ------------------------------------------------------------------ updates
    def set_sensor(self, name: str, binding: Optional[UUID], sensor_type: Optional[UUID]) -> None:
        with self._lock:
            self.sensors[name] = SensorEntry(name=name, binding=binding, type=sensor_type)
        self._notify()

    def register_sensor_uuid(self, serial: UUID) -> None:
        """Record that a physical sensor with ``serial`` is attached."""
        with self._lock:
            if serial not in self.known_serials:
                self.known_serials.append(serial)

    def add_config_changed_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Config change listener failed")
