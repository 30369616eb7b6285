from __future__ import annotations

import threading
import time

from capturepi.config.runtime import CaptureConfig
from capturepi.config.system_config import SystemConfig
from capturepi.core.capture import Capture
from capturepi.core.context import CaptureContext
from capturepi.core.controller import (
    MSG_NOT_RUNNING,
    MSG_RUNNING,
    MSG_SAVED,
    MSG_SHUTDOWN,
    MSG_STARTED,
    ControllerState,
    SessionController,
)
from capturepi.core.signals import EndCapture, StartCapture
from capturepi.hardware.interface import HardwareInterface
from capturepi.hardware.platform import Platform
from capturepi.sensors.accelerometer import MOCK_ACCELEROMETER_TYPE, AccelerometerMock
from capturepi.store.base import StoreIOError
from capturepi.store.memory import MemoryStore


def _context(store=None, frequency: float = 200.0) -> CaptureContext:
    sensor = AccelerometerMock("Accelerometer", seed=1)
    platform = Platform(
        set_sync_light=lambda state: None,
        set_buzzer=lambda state: None,
        sensors=[sensor],
    )
    system = SystemConfig()
    system.set_sensor("Accelerometer", sensor.serial, sensor.type)
    return CaptureContext(
        config=CaptureConfig(frequency_hz=frequency, buzzer_ms=0, sync_light_pattern_ms=[]),
        system_config=system,
        hardware=HardwareInterface(platform, system),
        store=store or MemoryStore(),
    )


def _saved_locations(context: CaptureContext) -> list:
    return [d.location for d in context.store.get_capture_locations()]


def test_start_then_end_saves_one_capture() -> None:
    context = _context()
    controller = SessionController(context)
    results: list[str] = []
    controller.enqueue_signal(StartCapture(results.append))
    controller.enqueue_signal(EndCapture(results.append))

    assert controller.step() is ControllerState.CAPTURING
    assert controller.step() is ControllerState.WAIT_FOR_END
    assert controller.step() is ControllerState.WAIT_FOR_START

    assert results == [MSG_STARTED, MSG_SAVED]
    locations = _saved_locations(context)
    assert len(locations) == 1
    loaded = Capture.open(context.store, locations[0])
    assert loaded.get_sensor_names() == frozenset({"Accelerometer"})


def test_end_without_capture_is_rejected() -> None:
    context = _context()
    controller = SessionController(context)
    results: list[str] = []
    controller.enqueue_signal(EndCapture(results.append))

    assert controller.step() is ControllerState.WAIT_FOR_START
    assert results == [MSG_NOT_RUNNING]
    assert _saved_locations(context) == []


def test_second_start_is_rejected_without_losing_first_session() -> None:
    context = _context()
    controller = SessionController(context)
    results: list[str] = []
    controller.enqueue_signal(StartCapture(results.append))
    controller.enqueue_signal(StartCapture(results.append))
    controller.enqueue_signal(EndCapture(results.append))

    controller.step()
    first = controller.execution.capture
    assert controller.step() is ControllerState.CAPTURING
    assert controller.execution.capture is first
    controller.step()
    controller.step()

    assert results == [MSG_STARTED, MSG_RUNNING, MSG_SAVED]
    assert _saved_locations(context) == [first.id]


def test_save_failure_is_reported_to_callback() -> None:
    class UnreachableStore(MemoryStore):
        def write(self, key, value):
            raise StoreIOError("backend unreachable")

    context = _context(store=UnreachableStore())
    controller = SessionController(context)
    results: list[str] = []
    controller.enqueue_signal(StartCapture(results.append))
    controller.enqueue_signal(EndCapture(results.append))
    for _ in range(3):
        controller.step()

    assert results[0] == MSG_STARTED
    assert results[1].startswith("Error, could not save capture")
    assert controller.state is ControllerState.WAIT_FOR_START
    assert controller.execution.capture is None


def test_threaded_session_records_samples() -> None:
    context = _context(frequency=200.0)
    controller = SessionController(context)
    started = threading.Event()
    saved = threading.Event()
    results: list[str] = []

    def _on_start(message: str) -> None:
        results.append(message)
        started.set()

    def _on_end(message: str) -> None:
        results.append(message)
        saved.set()

    controller.start()
    try:
        controller.enqueue_signal(StartCapture(_on_start))
        assert started.wait(5.0)
        time.sleep(0.1)
        controller.enqueue_signal(EndCapture(_on_end))
        assert saved.wait(5.0)
    finally:
        controller.stop(timeout=5.0)

    assert results == [MSG_STARTED, MSG_SAVED]
    assert controller.state is ControllerState.SHUTDOWN
    loaded = Capture.open(context.store, _saved_locations(context)[0])
    samples = loaded.get_samples()
    assert len(samples) > 0
    assert [s.index for s in samples] == list(range(len(samples)))
    assert all(s.get("Accelerometer") for s in samples)


def test_interrupt_mid_session_exits_without_saving() -> None:
    context = _context()
    controller = SessionController(context)
    started = threading.Event()

    thread = controller.start()
    controller.enqueue_signal(StartCapture(lambda _: started.set()))
    assert started.wait(5.0)
    controller.stop(timeout=5.0)

    assert not thread.is_alive()
    assert controller.state is ControllerState.SHUTDOWN
    assert _saved_locations(context) == []
    assert not controller.execution.capture.finalized


def test_keypad_presses_drive_the_controller() -> None:
    context = _context()
    controller = SessionController(context)
    context.hardware.set_signal_sink(controller.enqueue_signal)

    context.hardware.platform.press_key("1")
    assert controller.step() is ControllerState.CAPTURING
    context.hardware.platform.press_key("4")
    controller.step()
    assert controller.step() is ControllerState.WAIT_FOR_START
    assert len(_saved_locations(context)) == 1


def test_signal_after_stop_gets_shutdown_reply() -> None:
    context = _context()
    controller = SessionController(context)
    context.hardware.set_signal_sink(controller.enqueue_signal)
    controller.start()
    controller.stop(timeout=5.0)

    results: list[str] = []
    controller.enqueue_signal(StartCapture(results.append))
    context.hardware.platform.press_key("1")

    assert results == [MSG_SHUTDOWN]
    assert controller.signals.drain() == []


def test_unrepresentable_sensor_name_refuses_to_start() -> None:
    context = _context()
    context.system_config.set_sensor("Fork\x07", None, MOCK_ACCELEROMETER_TYPE)
    controller = SessionController(context)
    results: list[str] = []
    controller.enqueue_signal(StartCapture(results.append))

    assert controller.step() is ControllerState.WAIT_FOR_START
    assert results[0].startswith("Error, could not start capture")
    assert controller.execution.capture is None
