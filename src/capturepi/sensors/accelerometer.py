"""
Three-axis accelerometers.

Readings use the text form ``"(x,y,z)"`` in units of g, e.g.
``"(0.012,-0.998,0.031)"``. A missing reading is stored as an empty string.
"""

from __future__ import annotations

import logging
import random
import uuid
from typing import Dict, Optional, Type
from uuid import UUID

from ..core.models import Sample
from .base import Decoder, Sensor

logger = logging.getLogger(__name__)

FXOS8700CQ_TYPE = UUID("fe3c4af2-feb4-4c9b-a717-2d0db3052293")
MOCK_ACCELEROMETER_TYPE = UUID("3906c164-82c8-48f8-a154-a39a9d0269fa")


def format_reading(x: float, y: float, z: float) -> str:
    return f"({x:.4f},{y:.4f},{z:.4f})"


def _axes(data: str) -> Optional[tuple[float, float, float]]:
    parts = data.strip().lstrip("(").rstrip(")").split(",")
    if len(parts) != 3:
        logger.warning("Expected three axes in accelerometer reading %r", data)
        return None
    try:
        x, y, z = (float(p) for p in parts)
    except ValueError as exc:
        logger.warning("Bad accelerometer reading %r (%s)", data, exc)
        return None
    return x, y, z


class AccelerometerMock(Sensor):
    """Simulated accelerometer: gravity on Y plus small noise."""

    TYPE_UUID = MOCK_ACCELEROMETER_TYPE

    def __init__(self, name: str, serial: Optional[UUID] = None, *, seed: Optional[int] = None) -> None:
        super().__init__(name, serial or uuid.uuid5(uuid.NAMESPACE_OID, f"mock-accelerometer:{name}"))
        self._rng = random.Random(seed)

    def read_sample(self) -> str:
        noise = self._rng.gauss
        return format_reading(noise(0.0, 0.02), -1.0 + noise(0.0, 0.02), noise(0.0, 0.02))


class ThreeAxisDecoder(Decoder):
    """Decodes the ``"(x,y,z)"`` reading into per-axis values in g."""

    def _axis(self, sample: Sample, axis: int) -> Optional[float]:
        data = self.get_data(sample)
        if data is None:
            return None
        values = _axes(data)
        return None if values is None else values[axis]

    def get_x_axis_g(self, sample: Sample) -> Optional[float]:
        return self._axis(sample, 0)

    def get_y_axis_g(self, sample: Sample) -> Optional[float]:
        return self._axis(sample, 1)

    def get_z_axis_g(self, sample: Sample) -> Optional[float]:
        return self._axis(sample, 2)


class FXOS8700CQDecoder(ThreeAxisDecoder):
    TYPE_UUID = FXOS8700CQ_TYPE


class AccelerometerMockDecoder(ThreeAxisDecoder):
    TYPE_UUID = MOCK_ACCELEROMETER_TYPE


DECODERS: Dict[UUID, Type[Decoder]] = {
    FXOS8700CQ_TYPE: FXOS8700CQDecoder,
    MOCK_ACCELEROMETER_TYPE: AccelerometerMockDecoder,
}


def decoder_for(name: str, type_uuid: UUID) -> Decoder:
    """Return a decoder for the sensor named ``name`` of type ``type_uuid``."""
    try:
        return DECODERS[type_uuid](name)
    except KeyError:
        raise ValueError(f"No decoder registered for sensor type {type_uuid}") from None
