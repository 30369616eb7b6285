"""Session-control signals and the queue that hands them to the controller."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ResultCallback = Callable[[str], None]

SHUTDOWN_MESSAGE = "Error, system shutting down."


class QueueInterrupted(Exception):
    """Raised by :meth:`SignalQueue.dequeue_blocking` after :meth:`SignalQueue.interrupt`."""


def _ignore(_: str) -> None:
    return


@dataclass
class Signal:
    """
    A control event carrying a callback for its outcome.

    The callback runs exactly once; later results are logged and dropped.
    """

    callback: ResultCallback = field(default=_ignore)
    _answered: bool = field(default=False, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    @property
    def answered(self) -> bool:
        return self._answered

    def return_result(self, message: str) -> None:
        with self._lock:
            if self._answered:
                logger.warning("Dropping second result for %s: %s", type(self).__name__, message)
                return
            self._answered = True
        try:
            self.callback(message)
        except Exception:
            logger.exception("Result callback for %s failed", type(self).__name__)


@dataclass
class StartCapture(Signal):
    """Request to begin a new capture."""


@dataclass
class EndCapture(Signal):
    """Request to finish and persist the running capture."""


@dataclass
class Shutdown(Signal):
    """Sentinel that wakes a blocked consumer so it can exit."""


class SignalQueue:
    """
    Unbounded multi-producer, single-consumer hand-off of signals.

    Producers never block. The consumer blocks in :meth:`dequeue_blocking`
    until a signal arrives or :meth:`interrupt` is called. Signals offered
    after an interrupt are answered at once instead of being queued.
    """

    def __init__(self) -> None:
        self._queue: "queue.SimpleQueue[Signal]" = queue.SimpleQueue()
        self._interrupted = threading.Event()
        self._lock = threading.Lock()

    def enqueue(self, signal: Signal) -> None:
        with self._lock:
            if not self._interrupted.is_set():
                self._queue.put(signal)
                return
        signal.return_result(SHUTDOWN_MESSAGE)

    def dequeue_blocking(self) -> Signal:
        if self._interrupted.is_set():
            raise QueueInterrupted()
        signal = self._queue.get()
        if isinstance(signal, Shutdown) or self._interrupted.is_set():
            if not isinstance(signal, Shutdown):
                signal.return_result(SHUTDOWN_MESSAGE)
            raise QueueInterrupted()
        return signal

    def interrupt(self) -> None:
        """Release the consumer; every later dequeue raises :class:`QueueInterrupted`."""
        with self._lock:
            self._interrupted.set()
            self._queue.put(Shutdown())

    def drain(self) -> list[Signal]:
        """Remove and return every queued signal without blocking."""
        items: list[Signal] = []
        while True:
            try:
                items.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return items


def make_signal(kind: str, callback: Optional[ResultCallback] = None) -> Signal:
    """Build a signal from a short name such as ``"start"`` or ``"end"``."""
    key = kind.strip().lower().replace("-", "_")
    cb = callback or _ignore
    if key in {"start", "start_capture"}:
        return StartCapture(cb)
    if key in {"end", "stop", "end_capture"}:
        return EndCapture(cb)
    raise ValueError(f"Unknown signal kind {kind!r}")
