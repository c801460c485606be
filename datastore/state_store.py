from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Iterable, Optional, Tuple

from models.records import SensorState


class SensorStateStore:
    """Last-known reading per sensor, shared by the sampler and HTTP handlers.

    Entries are created on the first successful read and never evicted. Every
    accessor hands out copies, so callers cannot observe later updates.
    """

    def __init__(self) -> None:
        self._states: Dict[str, SensorState] = {}
        self._lock = Lock()

    def upsert(
        self, sensor_id: str, celsius: float, timestamp: Optional[datetime] = None
    ) -> None:
        self.upsert_many([(sensor_id, celsius)], timestamp)

    def upsert_many(
        self,
        readings: Iterable[Tuple[str, float]],
        timestamp: Optional[datetime] = None,
    ) -> None:
        """Apply a batch of readings atomically with respect to ``snapshot``."""
        stamp = timestamp or datetime.now(timezone.utc)
        batch = list(readings)
        with self._lock:
            for sensor_id, celsius in batch:
                state = self._states.get(sensor_id)
                if state is None:
                    self._states[sensor_id] = SensorState(
                        sensor_id=sensor_id, celsius=celsius, last_updated=stamp
                    )
                else:
                    state.celsius = celsius
                    state.last_updated = stamp

    def get(self, sensor_id: str) -> Optional[SensorState]:
        with self._lock:
            state = self._states.get(sensor_id)
            if state is None:
                return None
            return replace(state)

    def snapshot(self) -> list[SensorState]:
        """Return a point-in-time copy of every sensor, ordered by sensor id."""

        with self._lock:
            return [replace(self._states[key]) for key in sorted(self._states)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
