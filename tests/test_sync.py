from __future__ import annotations

import uuid

import pytest

from capturepi.core.capture import Capture
from capturepi.store.deflate import DeflateStore
from capturepi.store.memory import MemoryStore
from capturepi.store.sync import _should_sync, sync_stores


@pytest.mark.parametrize(
    "source_hash, destination_hash, expected",
    [
        ("", "", False),
        ("", "123", False),
        ("123", "", True),
        ("123", "123", False),
        ("123", "-45", True),
    ],
)
def test_should_sync(source_hash: str, destination_hash: str, expected: bool) -> None:
    assert _should_sync(source_hash, destination_hash) is expected


def test_sync_copies_blobs_and_index(sensor_types) -> None:
    source = DeflateStore(MemoryStore(page_size=2))
    destination = DeflateStore(MemoryStore())
    captures = []
    for n in range(3):
        capture = Capture(50.0, source, sensor_types)
        capture.add_sample({name: f"({n},0,1)" for name in sensor_types})
        capture.save()
        captures.append(capture)

    report = sync_stores(source, destination)

    assert set(report.copied) == {c.id for c in captures}
    assert set(report.indexed) == {c.id for c in captures}
    for capture in captures:
        copy = Capture.open(destination, capture.id)
        assert [s.values for s in copy.get_samples()] == [s.values for s in capture.get_samples()]


def test_second_sync_copies_only_changes() -> None:
    source, destination = MemoryStore(), MemoryStore()
    keys = [uuid.uuid4() for _ in range(4)]
    for key in keys:
        source.write(key, f"value {key}")
    sync_stores(source, destination)

    source.write(keys[0], "changed")
    report = sync_stores(source, destination)

    assert report.copied == [keys[0]]
    assert report.skipped == 3
    assert destination.read(keys[0]) == "changed"


def test_sync_limited_to_requested_keys() -> None:
    source, destination = MemoryStore(), MemoryStore()
    wanted, other = uuid.uuid4(), uuid.uuid4()
    source.write(wanted, "a")
    source.write(other, "b")

    report = sync_stores(source, destination, keys=[wanted])

    assert report.copied == [wanted]
    assert destination.read(other) is None
