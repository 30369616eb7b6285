"""Networked capture store: one row per key in a remote SQL table."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy import (
    Column,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from ..core.models import CaptureDescription
from ..tools.debug import time_block
from .base import (
    CAPTURE_LOCATIONS,
    CaptureStore,
    StoreIOError,
    join_locations,
    split_locations,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

metadata = MetaData()

data_table = Table(
    "DATA",
    metadata,
    Column("ID", String(36), primary_key=True),
    Column("VALUE", Text, nullable=False),
)

captures_table = Table(
    "CAPTURES",
    metadata,
    Column("LOCATION", String(36), primary_key=True),
    Column("SYSTEM", String(36)),
    Column("CREATEDTIME", String(64), nullable=False),
    Column("FREQUENCY", String(32), nullable=False),
)


def make_engine(url: str) -> Engine:
    """Create an engine for ``url``; in-memory SQLite shares one connection."""
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_engine(url, pool_pre_ping=True)


class SqlStore(CaptureStore):
    """
    Capture store on the ``DATA`` and ``CAPTURES`` tables of a SQL server.

    ``DATA`` maps string UUIDs to a ``VALUE`` text column. One reserved row
    holds the comma-joined capture location list; ``CAPTURES`` carries one row
    of metadata per capture. Key scans are paged by ``page_size`` using the
    last returned ID as an exclusive start key.
    """

    def __init__(
        self,
        engine: Union[Engine, str],
        *,
        system: Optional[UUID] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        create_tables: bool = True,
    ) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.engine = make_engine(engine) if isinstance(engine, str) else engine
        self.system = system
        self.page_size = page_size
        self._index_lock = threading.Lock()
        if create_tables:
            with self._errors("creating tables"):
                metadata.create_all(self.engine)

    # ------------------------------------------------------------------ internals
    @contextmanager
    def _errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error("Database error while %s: %s", action, exc)
            raise StoreIOError(f"Database error while {action}.") from exc

    @staticmethod
    def _read(conn: Connection, key: UUID) -> Optional[str]:
        row = conn.execute(
            select(data_table.c.VALUE).where(data_table.c.ID == str(key))
        ).first()
        return None if row is None else row[0]

    @staticmethod
    def _upsert(conn: Connection, key: UUID, value: str) -> None:
        result = conn.execute(
            update(data_table).where(data_table.c.ID == str(key)).values(VALUE=value)
        )
        if result.rowcount == 0:
            conn.execute(insert(data_table).values(ID=str(key), VALUE=value))

    # ------------------------------------------------------------------ key/value
    def read(self, key: UUID) -> Optional[str]:
        with self._errors(f"reading {key}"), self.engine.connect() as conn:
            return self._read(conn, key)

    def write(self, key: UUID, value: str) -> None:
        if value is None:
            raise ValueError("value must not be None")
        with time_block(f"SqlStore.write {key}"):
            with self._errors(f"writing {key}"), self.engine.begin() as conn:
                self._upsert(conn, key, value)

    def delete(self, key: UUID) -> None:
        with self._errors(f"deleting {key}"), self.engine.begin() as conn:
            conn.execute(delete(data_table).where(data_table.c.ID == str(key)))

    def scan_page(self, start_after: Optional[str] = None) -> Tuple[list[UUID], Optional[str]]:
        """Return one page of keys and the last evaluated key, if more remain."""
        query = (
            select(data_table.c.ID)
            .where(data_table.c.ID != str(CAPTURE_LOCATIONS))
            .order_by(data_table.c.ID)
            .limit(self.page_size + 1)
        )
        if start_after is not None:
            query = query.where(data_table.c.ID > start_after)
        with self._errors("scanning keys"), self.engine.connect() as conn:
            ids = [row[0] for row in conn.execute(query)]
        page = ids[: self.page_size]
        token = page[-1] if len(ids) > self.page_size else None
        return [UUID(i) for i in page], token

    def get_keys(self) -> Iterator[UUID]:
        keys, token = self.scan_page()
        yield from keys
        while token is not None:
            logger.debug("Continuing key scan after %s", token)
            keys, token = self.scan_page(token)
            yield from keys

    # ------------------------------------------------------------------ index
    def add_capture_description(self, description: CaptureDescription) -> None:
        system = description.system or self.system
        row = {
            "SYSTEM": None if system is None else str(system),
            "CREATEDTIME": description.created_time.isoformat(),
            "FREQUENCY": repr(float(description.frequency)),
        }
        with self._index_lock, self._errors("indexing capture"), self.engine.begin() as conn:
            locations = split_locations(self._read(conn, CAPTURE_LOCATIONS))
            if description.location not in locations:
                locations.append(description.location)
                self._upsert(conn, CAPTURE_LOCATIONS, join_locations(locations))
            loc = str(description.location)
            result = conn.execute(
                update(captures_table).where(captures_table.c.LOCATION == loc).values(**row)
            )
            if result.rowcount == 0:
                conn.execute(insert(captures_table).values(LOCATION=loc, **row))

    def get_capture_description(self, location: UUID) -> Optional[CaptureDescription]:
        with self._errors(f"reading capture {location}"), self.engine.connect() as conn:
            row = conn.execute(
                select(captures_table).where(captures_table.c.LOCATION == str(location))
            ).first()
        if row is None:
            return None
        return CaptureDescription(
            location=UUID(row.LOCATION),
            created_time=datetime.fromisoformat(row.CREATEDTIME),
            frequency=float(row.FREQUENCY),
            system=UUID(row.SYSTEM) if row.SYSTEM else None,
        )

    def remove_capture_description(self, location: UUID) -> None:
        with self._index_lock, self._errors("removing capture"), self.engine.begin() as conn:
            locations = split_locations(self._read(conn, CAPTURE_LOCATIONS))
            if location in locations:
                locations.remove(location)
                self._upsert(conn, CAPTURE_LOCATIONS, join_locations(locations))
            conn.execute(
                delete(captures_table).where(captures_table.c.LOCATION == str(location))
            )

    def get_capture_locations(self) -> Iterator[CaptureDescription]:
        locations = split_locations(self.read(CAPTURE_LOCATIONS))
        for location in locations:
            description = self.get_capture_description(location)
            if description is None:
                logger.warning("Capture %s is listed but has no CAPTURES row", location)
                continue
            yield description

    def close(self) -> None:
        self.engine.dispose()
