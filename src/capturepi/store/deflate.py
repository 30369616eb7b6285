"""Store decorator that deflates values before handing them to another store."""

from __future__ import annotations

import base64
import binascii
import logging
import zlib
from typing import Iterable, Iterator, Optional
from uuid import UUID

from ..core.models import CaptureDescription
from .base import CaptureStore, StoreIOError

logger = logging.getLogger(__name__)


def compress(value: str) -> str:
    """Deflate the UTF-8 bytes of ``value`` and return them as base64 text."""
    packed = zlib.compress(value.encode("utf-8"))
    return base64.b64encode(packed).decode("ascii")


def decompress(data: str) -> str:
    """Reverse :func:`compress`."""
    try:
        packed = base64.b64decode(data.encode("ascii"), validate=True)
        return zlib.decompress(packed).decode("utf-8")
    except (binascii.Error, zlib.error, UnicodeError) as exc:
        logger.error("Stored value is not valid deflated data: %s", exc)
        raise StoreIOError("Stored value is not valid deflated data.") from exc


class DeflateStore(CaptureStore):
    """Wraps ``inner`` so every value is stored compressed."""

    def __init__(self, inner: CaptureStore) -> None:
        self.inner = inner

    def read(self, key: UUID) -> Optional[str]:
        data = self.inner.read(key)
        if data is None:
            return None
        return decompress(data)

    def write(self, key: UUID, value: str) -> None:
        self.inner.write(key, compress(value))

    def delete(self, key: UUID) -> None:
        self.inner.delete(key)

    def get_keys(self) -> Iterator[UUID]:
        return self.inner.get_keys()

    def get_hashes(self, keys: Iterable[UUID]) -> dict[UUID, str]:
        return self.inner.get_hashes(keys)

    def add_capture_description(self, description: CaptureDescription) -> None:
        self.inner.add_capture_description(description)

    def get_capture_description(self, location: UUID) -> Optional[CaptureDescription]:
        return self.inner.get_capture_description(location)

    def remove_capture_description(self, location: UUID) -> None:
        self.inner.remove_capture_description(location)

    def get_capture_locations(self) -> Iterator[CaptureDescription]:
        return self.inner.get_capture_locations()

    def close(self) -> None:
        self.inner.close()
