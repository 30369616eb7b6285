"""Build the configured capture store chain."""

from __future__ import annotations

import enum
import logging
from typing import Callable, Dict, Optional
from uuid import UUID

from ..config.runtime import StoreConfig
from .base import CaptureStore
from .deflate import DeflateStore
from .memory import MemoryStore
from .sql import SqlStore

logger = logging.getLogger(__name__)


class StoreKind(enum.Enum):
    MEMORY = "memory"
    SQL = "sql"


def _build_memory(cfg: StoreConfig, system: Optional[UUID]) -> CaptureStore:
    return MemoryStore(page_size=cfg.page_size, system=system)


def _build_sql(cfg: StoreConfig, system: Optional[UUID]) -> CaptureStore:
    return SqlStore(cfg.url, system=system, page_size=cfg.page_size)


STORE_BUILDERS: Dict[StoreKind, Callable[[StoreConfig, Optional[UUID]], CaptureStore]] = {
    StoreKind.MEMORY: _build_memory,
    StoreKind.SQL: _build_sql,
}


def build_store(cfg: StoreConfig, system: Optional[UUID] = None) -> CaptureStore:
    """Create the backend named by ``cfg.kind``, deflating values if ``cfg.compress``."""
    try:
        kind = StoreKind(cfg.kind)
    except ValueError:
        raise ValueError(f"Unknown store kind {cfg.kind!r}") from None
    store = STORE_BUILDERS[kind](cfg, system)
    logger.info("Using %s capture store (compressed=%s)", kind.value, cfg.compress)
    if cfg.compress:
        store = DeflateStore(store)
    return store
