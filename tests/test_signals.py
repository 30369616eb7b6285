from __future__ import annotations

import threading

import pytest

from capturepi.core.signals import (
    SHUTDOWN_MESSAGE,
    EndCapture,
    QueueInterrupted,
    SignalQueue,
    StartCapture,
    make_signal,
)


def test_signals_are_dequeued_in_order() -> None:
    queue = SignalQueue()
    first, second = StartCapture(), EndCapture()
    queue.enqueue(first)
    queue.enqueue(second)
    assert queue.dequeue_blocking() is first
    assert queue.dequeue_blocking() is second


def test_result_callback_runs_once() -> None:
    results: list[str] = []
    signal = StartCapture(results.append)
    signal.return_result("one")
    signal.return_result("two")
    assert results == ["one"]
    assert signal.answered


def test_failing_callback_does_not_propagate() -> None:
    def _boom(_: str) -> None:
        raise RuntimeError("callback failed")

    EndCapture(_boom).return_result("done")


def test_interrupt_releases_blocked_consumer() -> None:
    queue = SignalQueue()
    outcome: list[str] = []

    def _consume() -> None:
        try:
            queue.dequeue_blocking()
        except QueueInterrupted:
            outcome.append("interrupted")

    consumer = threading.Thread(target=_consume)
    consumer.start()
    queue.interrupt()
    consumer.join(timeout=5.0)

    assert not consumer.is_alive()
    assert outcome == ["interrupted"]
    with pytest.raises(QueueInterrupted):
        queue.dequeue_blocking()


def test_concurrent_producers_do_not_lose_signals() -> None:
    queue = SignalQueue()
    producers = [
        threading.Thread(target=lambda: [queue.enqueue(StartCapture()) for _ in range(100)])
        for _ in range(4)
    ]
    for t in producers:
        t.start()
    for t in producers:
        t.join()
    assert len(queue.drain()) == 400


def test_make_signal() -> None:
    assert isinstance(make_signal("start"), StartCapture)
    assert isinstance(make_signal("End-Capture"), EndCapture)
    with pytest.raises(ValueError):
        make_signal("reboot")


def test_signal_after_interrupt_is_answered() -> None:
    queue = SignalQueue()
    queue.interrupt()
    results: list[str] = []

    queue.enqueue(StartCapture(results.append))

    assert results == [SHUTDOWN_MESSAGE]
    assert [type(s).__name__ for s in queue.drain()] == ["Shutdown"]
