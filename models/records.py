"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional


@dataclass(slots=True)
class SensorState:
    """Last successful reading of one sensor."""

    sensor_id: str
    celsius: float
    last_updated: datetime


@dataclass(frozen=True, slots=True)
class DeviceEntry:
    """A device directory discovered under the one-wire devices root."""

    sensor_id: str
    path: Path


@dataclass
class CycleReport:
    """Outcome of a single sampling cycle."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    device_count: int = 0
    updated: Dict[str, float] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    enumeration_error: Optional[str] = None

    @property
    def updated_count(self) -> int:
        return len(self.updated)

    @property
    def error_count(self) -> int:
        return len(self.failed)
