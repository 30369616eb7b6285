"""Signal-driven state machine that runs capture sessions end to end."""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..store.base import StoreIOError
from .capture import Capture
from .context import CaptureContext
from .signals import (
    SHUTDOWN_MESSAGE,
    EndCapture,
    QueueInterrupted,
    Signal,
    SignalQueue,
    StartCapture,
)

logger = logging.getLogger(__name__)

MSG_STARTED = "Capture started."
MSG_SAVED = "Capture saved."
MSG_NOT_RUNNING = "Error, no capture running."
MSG_RUNNING = "Error, capture running."
MSG_SHUTDOWN = SHUTDOWN_MESSAGE
MSG_UNKNOWN = "Error, unknown signal."


class ControllerState(enum.Enum):
    WAIT_FOR_START = "wait_for_start"
    CAPTURING = "capturing"
    WAIT_FOR_END = "wait_for_end"
    SHUTDOWN = "shutdown"


class SamplePoller:
    """Appends one sample per period to a capture on a background thread."""

    def __init__(self, capture: Capture, read: Callable[[], Dict[str, str]]) -> None:
        self.capture = capture
        self._read = read
        self._names = capture.get_sensor_names()
        self._interval = 1.0 / capture.frequency
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            name=f"SamplePoller-{capture.id}",
            daemon=True,
        )

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join()

    def _run(self) -> None:
        start = time.monotonic()
        taken = 0
        while not self._stop_event.is_set():
            try:
                values = {k: v for k, v in self._read().items() if k in self._names}
                self.capture.add_sample(values)
            except Exception:
                logger.exception("Sample poller for capture %s failed", self.capture.id)
                return
            taken += 1
            # schedule against the start time so jitter does not accumulate
            delay = start + taken * self._interval - time.monotonic()
            if delay > 0 and self._stop_event.wait(delay):
                break


@dataclass
class ExecutionContext:
    """State carried between controller states for the current session."""

    capture: Optional[Capture] = None
    poller: Optional[SamplePoller] = None
    pending: Optional[Signal] = None


class SessionController:
    """
    Runs one capture session at a time from signals on a :class:`SignalQueue`.

    Each loop iteration hands the current state exactly one signal (taken
    with a blocking dequeue) and moves to the state it returns. The loop
    only ends when the queue is interrupted.
    """

    def __init__(self, context: CaptureContext, signals: Optional[SignalQueue] = None) -> None:
        self.context = context
        self.signals = signals or SignalQueue()
        self.state = ControllerState.WAIT_FOR_START
        self.execution = ExecutionContext()
        self._thread: Optional[threading.Thread] = None
        self._handlers: Dict[ControllerState, Callable[[], ControllerState]] = {
            ControllerState.WAIT_FOR_START: self._wait_for_start,
            ControllerState.CAPTURING: self._capturing,
            ControllerState.WAIT_FOR_END: self._wait_for_end,
        }

    # ------------------------------------------------------------------ intake
    def enqueue_signal(self, signal: Signal) -> None:
        self.signals.enqueue(signal)

    # ------------------------------------------------------------------ lifecycle
    def start(self) -> threading.Thread:
        """Run the controller loop on its own thread."""
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("Controller is already running.")
        self._thread = threading.Thread(target=self.run, name="SessionController", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        """Interrupt the loop and wait for the controller thread to exit."""
        self.signals.interrupt()
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self) -> None:
        logger.info("Controller started in state %s", self.state.value)
        while self.state is not ControllerState.SHUTDOWN:
            self.step()
        logger.info("Controller stopped")

    def step(self) -> ControllerState:
        """Execute the current state once and return the next state."""
        handler = self._handlers[self.state]
        try:
            next_state = handler()
        except QueueInterrupted:
            logger.info("Interrupted waiting for signal in state %s", self.state.value)
            self._shutdown()
            next_state = ControllerState.SHUTDOWN
        if next_state is not self.state:
            logger.debug("Transition %s -> %s", self.state.value, next_state.value)
        self.state = next_state
        return next_state

    # ------------------------------------------------------------------ states
    def _wait_for_start(self) -> ControllerState:
        signal = self.signals.dequeue_blocking()
        if isinstance(signal, EndCapture):
            signal.return_result(MSG_NOT_RUNNING)
            return ControllerState.WAIT_FOR_START
        if not isinstance(signal, StartCapture):
            signal.return_result(MSG_UNKNOWN)
            return ControllerState.WAIT_FOR_START

        ctx = self.context
        try:
            capture = Capture(ctx.config.frequency_hz, ctx.store, ctx.sensor_types())
        except ValueError as exc:
            logger.error("Could not start capture: %s", exc)
            signal.return_result(f"Error, could not start capture: {exc}")
            return ControllerState.WAIT_FOR_START
        poller = SamplePoller(capture, ctx.hardware.read_sample)
        self.execution = ExecutionContext(capture=capture, poller=poller)
        poller.start()
        logger.info("Started capture %s at %.3f Hz", capture.id, capture.frequency)
        self._signal_start()
        signal.return_result(MSG_STARTED)
        return ControllerState.CAPTURING

    def _capturing(self) -> ControllerState:
        signal = self.signals.dequeue_blocking()
        if isinstance(signal, EndCapture):
            self.execution.pending = signal
            return ControllerState.WAIT_FOR_END
        signal.return_result(MSG_RUNNING)
        return ControllerState.CAPTURING

    def _wait_for_end(self) -> ControllerState:
        signal = self.execution.pending
        if signal is None:
            signal = self.signals.dequeue_blocking()
            if not isinstance(signal, EndCapture):
                signal.return_result(MSG_RUNNING)
                return ControllerState.WAIT_FOR_END

        execution = self.execution
        if execution.poller is not None:
            execution.poller.stop()
        capture = execution.capture
        if capture is None:
            signal.return_result(MSG_NOT_RUNNING)
        else:
            try:
                capture.save()
            except StoreIOError as exc:
                logger.error("Could not save capture %s: %s", capture.id, exc)
                signal.return_result(f"Error, could not save capture: {exc}")
            else:
                signal.return_result(MSG_SAVED)
        self.execution = ExecutionContext()
        self._signal_end()
        return ControllerState.WAIT_FOR_START

    # ------------------------------------------------------------------ helpers
    def _signal_start(self) -> None:
        cfg = self.context.config
        try:
            self.context.hardware.sound_buzzer(cfg.buzzer_ms)
            self.context.hardware.flash_sync_light(cfg.sync_light_pattern_ms)
        except Exception:
            logger.exception("Could not start capture indicators")

    def _signal_end(self) -> None:
        try:
            self.context.hardware.sound_buzzer(self.context.config.buzzer_ms)
        except Exception:
            logger.exception("Could not start end-of-capture buzzer")

    def _shutdown(self) -> None:
        execution = self.execution
        if execution.poller is not None:
            execution.poller.stop()
        capture = execution.capture
        if capture is not None and not capture.finalized:
            logger.warning(
                "Capture %s interrupted before it was saved; %d samples left unsaved",
                capture.id,
                capture.get_sample_count(),
            )
        if execution.pending is not None:
            execution.pending.return_result(MSG_SHUTDOWN)
        for signal in self.signals.drain():
            signal.return_result(MSG_SHUTDOWN)
