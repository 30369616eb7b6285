from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from capturepi.core.models import CaptureDescription
from capturepi.store.base import StoreIOError, content_hash
from capturepi.store.deflate import DeflateStore, compress, decompress
from capturepi.store.memory import MemoryStore


@pytest.mark.parametrize(
    "value",
    [
        "",
        "hello",
        "Grüße aus Zürich, 東京, 🚵",
        "\x00\x01\xff binary-ish \r\n\t",
        "x" * 100_000,
    ],
)
def test_compress_round_trip(value: str) -> None:
    packed = compress(value)
    assert packed.isascii()
    assert decompress(packed) == value


def test_values_are_stored_compressed() -> None:
    inner = MemoryStore()
    store = DeflateStore(inner)
    key = uuid.uuid4()
    text = "<capture>" + "<sample/>" * 500 + "</capture>"

    store.write(key, text)

    assert inner.read(key) != text
    assert len(inner.read(key)) < len(text)
    assert store.read(key) == text


def test_absent_key_reads_none() -> None:
    assert DeflateStore(MemoryStore()).read(uuid.uuid4()) is None


def test_corrupt_value_raises_store_error() -> None:
    inner = MemoryStore()
    key = uuid.uuid4()
    inner.write(key, "not deflated at all!")
    with pytest.raises(StoreIOError):
        DeflateStore(inner).read(key)


def test_key_and_index_operations_delegate() -> None:
    inner = MemoryStore(page_size=2)
    store = DeflateStore(inner)
    keys = [uuid.uuid4() for _ in range(5)]
    for key in keys:
        store.write(key, "v")
    assert set(store.get_keys()) == set(keys)
    assert store.get_hashes(keys[:1]) == {keys[0]: content_hash(inner.read(keys[0]))}

    description = CaptureDescription(uuid.uuid4(), datetime.now(timezone.utc), 20.0)
    store.add_capture_description(description)
    assert inner.get_capture_description(description.location) == description
    assert list(store.get_capture_locations()) == [description]
    store.remove_capture_description(description.location)
    assert store.get_capture_description(description.location) is None

    store.delete(keys[0])
    assert inner.read(keys[0]) is None
