"""Capture persistence: the key-value contract and its implementations.

- :mod:`base` defines :class:`CaptureStore`, :class:`StoreIOError`, and the
  content hash used for change detection.
- :mod:`memory` and :mod:`sql` are backends; :mod:`deflate` is a decorator
  that compresses values on their way to another store.
- :mod:`factory` assembles the configured chain and :mod:`sync` copies
  diverging keys between two stores.
"""

from .base import CAPTURE_LOCATIONS, CaptureStore, StoreIOError, content_hash
from .deflate import DeflateStore
from .factory import StoreKind, build_store
from .memory import MemoryStore
from .sql import SqlStore
from .sync import SyncReport, sync_stores

__all__ = [
    "CAPTURE_LOCATIONS",
    "CaptureStore",
    "DeflateStore",
    "MemoryStore",
    "SqlStore",
    "StoreIOError",
    "StoreKind",
    "SyncReport",
    "build_store",
    "content_hash",
    "sync_stores",
]
