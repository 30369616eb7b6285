"""Sensor handles and decoders.

:mod:`base` defines the :class:`Sensor` handle read by the sample poller and
the per-axis capability protocols; :mod:`accelerometer` provides the mock
accelerometer plus decoders for the three-axis text encoding.
"""

from .accelerometer import AccelerometerMock, decoder_for
from .base import Decoder, Sensor, XAxisReader, YAxisReader, ZAxisReader

__all__ = [
    "AccelerometerMock",
    "Decoder",
    "Sensor",
    "XAxisReader",
    "YAxisReader",
    "ZAxisReader",
    "decoder_for",
]
