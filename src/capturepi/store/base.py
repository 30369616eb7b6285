"""Key-value contract shared by every capture store implementation."""

from __future__ import annotations

import abc
import zlib
from typing import Iterable, Iterator, Optional
from uuid import UUID

from ..core.models import CaptureDescription

# Well-known key holding the comma-joined list of capture locations.
CAPTURE_LOCATIONS = UUID("b4522adf-5581-4e5a-a2e8-6ea94d25c0b3")


class StoreIOError(IOError):
    """Raised when a store or its transport cannot complete an operation."""


def content_hash(value: Optional[str]) -> str:
    """
    Return the decimal signed 32-bit CRC of ``value``.

    An absent value hashes to ``""``. A stored empty string hashes to ``"0"``
    so the two cases stay distinguishable.
    """
    if value is None:
        return ""
    crc = zlib.crc32(value.encode("utf-8"))
    if crc >= 2**31:
        crc -= 2**32
    return str(crc)


def join_locations(locations: Iterable[UUID]) -> str:
    return ",".join(str(loc) for loc in locations)


def split_locations(raw: Optional[str]) -> list[UUID]:
    if not raw:
        return []
    return [UUID(part) for part in raw.split(",") if part.strip()]


class CaptureStore(abc.ABC):
    """
    Persistent mapping of UUID keys to string blobs plus a capture index.

    All operations raise :class:`StoreIOError` on transport or storage
    failure; nothing is dropped silently.
    """

    @abc.abstractmethod
    def read(self, key: UUID) -> Optional[str]:
        """Return the value stored at ``key`` or ``None`` if absent."""

    @abc.abstractmethod
    def write(self, key: UUID, value: str) -> None:
        """Store ``value`` at ``key``, replacing any previous value."""

    @abc.abstractmethod
    def delete(self, key: UUID) -> None:
        """Remove ``key``; deleting an absent key is not an error."""

    @abc.abstractmethod
    def get_keys(self) -> Iterator[UUID]:
        """Lazily yield every data key, following backend pagination."""

    def get_hashes(self, keys: Iterable[UUID]) -> dict[UUID, str]:
        """Return ``key -> content hash`` for each of ``keys``."""
        return {key: content_hash(self.read(key)) for key in keys}

    # ------------------------------------------------------------------ index
    @abc.abstractmethod
    def add_capture_description(self, description: CaptureDescription) -> None:
        ...

    @abc.abstractmethod
    def get_capture_description(self, location: UUID) -> Optional[CaptureDescription]:
        ...

    @abc.abstractmethod
    def remove_capture_description(self, location: UUID) -> None:
        ...

    @abc.abstractmethod
    def get_capture_locations(self) -> Iterator[CaptureDescription]:
        """Yield the description of every indexed capture, oldest first."""

    def close(self) -> None:
        """Release backend resources (no-op by default)."""


__all__ = [
    "CAPTURE_LOCATIONS",
    "CaptureStore",
    "StoreIOError",
    "content_hash",
    "join_locations",
    "split_locations",
]
