"""Sensor handles and the per-axis capabilities decoders can offer."""

from __future__ import annotations

import abc
from typing import Optional, Protocol, runtime_checkable
from uuid import UUID

from ..core.models import Sample


class Sensor(abc.ABC):
    """A physical (or simulated) sensor attached to the platform."""

    #: UUID identifying the kind of sensor; stored with every capture.
    TYPE_UUID: UUID

    def __init__(self, name: str, serial: UUID) -> None:
        self.name = name
        self.serial = serial

    @property
    def type(self) -> UUID:
        return self.TYPE_UUID

    @abc.abstractmethod
    def read_sample(self) -> str:
        """Return the current reading in the sensor's raw text encoding."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, serial={self.serial})"


class Decoder:
    """Base for turning raw sample text of one named sensor into values."""

    TYPE_UUID: UUID

    def __init__(self, name: str) -> None:
        self.name = name

    def get_data(self, sample: Sample) -> Optional[str]:
        data = sample.get(self.name)
        if data is None or not data.strip():
            return None
        return data


@runtime_checkable
class XAxisReader(Protocol):
    def get_x_axis_g(self, sample: Sample) -> Optional[float]:  # pragma: no cover - protocol
        ...


@runtime_checkable
class YAxisReader(Protocol):
    def get_y_axis_g(self, sample: Sample) -> Optional[float]:  # pragma: no cover - protocol
        ...


@runtime_checkable
class ZAxisReader(Protocol):
    def get_z_axis_g(self, sample: Sample) -> Optional[float]:  # pragma: no cover - protocol
        ...
