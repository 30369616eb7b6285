"""In-process capture store backed by plain dictionaries."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterator, Optional, Tuple
from uuid import UUID

from ..core.models import CaptureDescription
from .base import (
    CAPTURE_LOCATIONS,
    CaptureStore,
    join_locations,
    split_locations,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


class MemoryStore(CaptureStore):
    """
    Dictionary store with the same paged scan as the networked backend.

    Keys are scanned in sorted string order, ``page_size`` at a time, and the
    last key of each page is handed back as the continuation token.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE, system: Optional[UUID] = None) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.page_size = page_size
        self.system = system
        self._data: Dict[UUID, str] = {}
        self._captures: Dict[UUID, CaptureDescription] = {}
        self._lock = threading.RLock()

    def read(self, key: UUID) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def write(self, key: UUID, value: str) -> None:
        if value is None:
            raise ValueError("value must not be None")
        with self._lock:
            self._data[key] = value

    def delete(self, key: UUID) -> None:
        with self._lock:
            self._data.pop(key, None)

    def scan_page(self, start_after: Optional[str] = None) -> Tuple[list[UUID], Optional[str]]:
        """Return one page of keys and the token for the next page (or ``None``)."""
        with self._lock:
            ids = sorted(str(k) for k in self._data if k != CAPTURE_LOCATIONS)
        if start_after is not None:
            ids = [i for i in ids if i > start_after]
        page = ids[: self.page_size]
        token = page[-1] if len(ids) > self.page_size else None
        return [UUID(i) for i in page], token

    def get_keys(self) -> Iterator[UUID]:
        keys, token = self.scan_page()
        yield from keys
        while token is not None:
            keys, token = self.scan_page(token)
            yield from keys

    # ------------------------------------------------------------------ index
    def add_capture_description(self, description: CaptureDescription) -> None:
        with self._lock:
            locations = split_locations(self._data.get(CAPTURE_LOCATIONS))
            if description.location not in locations:
                locations.append(description.location)
            self._data[CAPTURE_LOCATIONS] = join_locations(locations)
            if description.system is None and self.system is not None:
                description = CaptureDescription(
                    location=description.location,
                    created_time=description.created_time,
                    frequency=description.frequency,
                    system=self.system,
                )
            self._captures[description.location] = description
        logger.debug("Indexed capture %s", description.location)

    def get_capture_description(self, location: UUID) -> Optional[CaptureDescription]:
        with self._lock:
            return self._captures.get(location)

    def remove_capture_description(self, location: UUID) -> None:
        with self._lock:
            locations = [
                loc for loc in split_locations(self._data.get(CAPTURE_LOCATIONS)) if loc != location
            ]
            self._data[CAPTURE_LOCATIONS] = join_locations(locations)
            self._captures.pop(location, None)

    def get_capture_locations(self) -> Iterator[CaptureDescription]:
        with self._lock:
            locations = split_locations(self._data.get(CAPTURE_LOCATIONS))
            found = [self._captures[loc] for loc in locations if loc in self._captures]
        return iter(found)
