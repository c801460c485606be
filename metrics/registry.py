"""Prometheus metrics for the one-wire temperature sensors.

Each sensor gets one child of the ``temperature_celsius`` gauge family,
labelled ``sensor=<id>``. Children are created on first sight and cached, so
repeated lookups for the same id always return the same handle.
"""

from __future__ import annotations

import time
from datetime import datetime
from threading import Lock
from typing import Dict, List, Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, generate_latest

from sensors.errors import MetricRegistrationConflict

TEMPERATURE_METRIC = "temperature_celsius"
SENSOR_LABEL = "sensor"


class MetricRegistry:
    """Owns the sensor id -> gauge mapping and renders the exposition."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self._handles: Dict[str, Gauge] = {}
        self._lock = Lock()

        try:
            self._temperature = Gauge(
                TEMPERATURE_METRIC,
                "Temperature reading in degrees Celsius",
                labelnames=[SENSOR_LABEL],
                registry=self.registry,
            )
            self._last_update = Gauge(
                "temperature_sensor_last_update_timestamp_seconds",
                "Unix time of the last successful reading per sensor",
                labelnames=[SENSOR_LABEL],
                registry=self.registry,
            )
            self._read_errors = Counter(
                "temperature_sensor_read_errors_total",
                "Failed sensor reads by sensor and error type",
                labelnames=[SENSOR_LABEL, "reason"],
                registry=self.registry,
            )
            self._cycles = Counter(
                "temperature_sampling_cycles_total",
                "Completed sampling cycles",
                registry=self.registry,
            )
            self._cycle_duration = Gauge(
                "temperature_sampling_cycle_duration_seconds",
                "Wall time spent in the most recent sampling cycle",
                registry=self.registry,
            )
        except ValueError as exc:
            raise MetricRegistrationConflict(str(exc)) from exc

    def get_or_create_metric(self, sensor_id: str) -> Gauge:
        """Return the gauge child for ``sensor_id``, creating it on first sight."""
        with self._lock:
            handle = self._handles.get(sensor_id)
            if handle is None:
                handle = self._temperature.labels(**{SENSOR_LABEL: sensor_id})
                self._handles[sensor_id] = handle
            return handle

    @staticmethod
    def set_value(handle: Gauge, celsius: float) -> None:
        handle.set(celsius)

    def record_update(
        self, sensor_id: str, celsius: float, timestamp: Optional[datetime] = None
    ) -> None:
        self.set_value(self.get_or_create_metric(sensor_id), celsius)
        updated_at = timestamp.timestamp() if timestamp is not None else time.time()
        self._last_update.labels(**{SENSOR_LABEL: sensor_id}).set(updated_at)

    def record_read_error(self, sensor_id: str, reason: str) -> None:
        self._read_errors.labels(**{SENSOR_LABEL: sensor_id, "reason": reason}).inc()

    def record_cycle(self, duration_seconds: float) -> None:
        self._cycles.inc()
        self._cycle_duration.set(duration_seconds)

    @property
    def metric_count(self) -> int:
        with self._lock:
            return len(self._handles)

    def sensor_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._handles)

    def render_all(self) -> bytes:
        """Serialize every registered metric in the Prometheus text format."""
        return generate_latest(self.registry)
