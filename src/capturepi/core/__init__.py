"""Capture sessions: samples, captures, signals, and the session controller.

Only the leaf modules are re-exported here because the store layer imports
:mod:`models`. Import :class:`~capturepi.core.capture.Capture` and
:class:`~capturepi.core.controller.SessionController` from their modules.
"""

from .models import CaptureDescription, Sample
from .signals import (
    EndCapture,
    QueueInterrupted,
    Shutdown,
    Signal,
    SignalQueue,
    StartCapture,
    make_signal,
)

__all__ = [
    "CaptureDescription",
    "EndCapture",
    "QueueInterrupted",
    "Sample",
    "Shutdown",
    "Signal",
    "SignalQueue",
    "StartCapture",
    "make_signal",
]
