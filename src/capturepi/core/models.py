"""Shared dataclasses for capture samples and index metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional
from uuid import UUID


@dataclass(frozen=True)
class Sample:
    """One reading of every bound sensor, taken at ``timestamp``."""

    index: int
    timestamp: datetime
    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # freeze the mapping so the sample cannot change after creation
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, sensor_name: str) -> Optional[str]:
        return self.values.get(sensor_name)


@dataclass(frozen=True)
class CaptureDescription:
    """Index entry for a capture, stored apart from the bulk payload."""

    location: UUID
    created_time: datetime
    frequency: float
    system: Optional[UUID] = None
