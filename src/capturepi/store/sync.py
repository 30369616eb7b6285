"""Copy diverging keys from one capture store to another."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional
from uuid import UUID

from .base import CaptureStore

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """Outcome of a store sync operation."""

    copied: list[UUID] = field(default_factory=list)
    skipped: int = 0
    indexed: list[UUID] = field(default_factory=list)


def _should_sync(source_hash: str, destination_hash: str) -> bool:
    """Return True if the destination copy is missing or differs."""
    if source_hash == "":
        return False
    return source_hash != destination_hash


def sync_stores(
    source: CaptureStore,
    destination: CaptureStore,
    keys: Optional[Iterable[UUID]] = None,
) -> SyncReport:
    """
    Transfer every key whose content hash differs between the two stores.

    Both stores should apply the same value encoding (e.g. both deflated) so
    that equal content hashes equally. Capture index entries missing on the
    destination are added after their blobs.
    """
    wanted = list(keys) if keys is not None else list(source.get_keys())
    source_hashes = source.get_hashes(wanted)
    destination_hashes = destination.get_hashes(wanted)

    report = SyncReport()
    for key in wanted:
        if not _should_sync(source_hashes.get(key, ""), destination_hashes.get(key, "")):
            report.skipped += 1
            continue
        value = source.read(key)
        if value is None:
            report.skipped += 1
            continue
        destination.write(key, value)
        report.copied.append(key)
        logger.debug("Copied %s", key)

    wanted_set = set(wanted)
    for description in source.get_capture_locations():
        if description.location not in wanted_set:
            continue
        if destination.get_capture_description(description.location) is None:
            destination.add_capture_description(description)
            report.indexed.append(description.location)

    logger.info(
        "Synced %d keys (%d unchanged), indexed %d captures",
        len(report.copied),
        report.skipped,
        len(report.indexed),
    )
    return report
