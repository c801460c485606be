"""Background sampling of one-wire temperature sensors."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from datastore.state_store import SensorStateStore
from metrics.registry import MetricRegistry
from models.records import CycleReport
from sensors.devices import list_sensor_devices
from sensors.errors import EnumerationFailed, ReadError
from sensors.reader import read_temperature

logger = logging.getLogger(__name__)


class SamplerState(str, Enum):
    idle = "idle"
    polling = "polling"


class Sampler:
    """Polls every sensor on a fixed interval and publishes the readings.

    Sensor files are read without holding any lock; the store and metric
    registry are only touched once the whole cycle's readings are in hand.
    """

    def __init__(
        self,
        devices_root: Union[str, Path],
        store: SensorStateStore,
        metrics: MetricRegistry,
        interval_seconds: float = 60.0,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("Sampling interval must be positive.")
        self.devices_root = Path(devices_root)
        self.store = store
        self.metrics = metrics
        self.interval_seconds = interval_seconds
        self.state = SamplerState.idle
        self.last_report: Optional[CycleReport] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._start_lock = threading.Lock()

    def run_cycle(self) -> CycleReport:
        """Enumerate, read and publish once. Never raises for sensor or directory errors."""
        self.state = SamplerState.polling
        start_time = time.perf_counter()
        report = CycleReport(started_at=datetime.now(timezone.utc))
        try:
            try:
                devices = list_sensor_devices(self.devices_root)
            except EnumerationFailed as exc:
                report.enumeration_error = exc.reason
                logger.warning(
                    "Failed to read devices directory",
                    extra={"device_path": str(exc.root), "reason": exc.reason},
                )
                devices = []

            report.device_count = len(devices)
            for device in devices:
                try:
                    celsius = read_temperature(device.path)
                except ReadError as exc:
                    report.failed[device.sensor_id] = exc.reason
                    self.metrics.record_read_error(device.sensor_id, type(exc).__name__)
                    logger.warning(
                        "Failed to read temperature",
                        extra={"sensor_id": device.sensor_id, "reason": exc.reason},
                    )
                    continue
                report.updated[device.sensor_id] = celsius
                logger.debug(
                    "Read temperature",
                    extra={"sensor_id": device.sensor_id, "celsius": f"{celsius:.3f}"},
                )

            finished_at = datetime.now(timezone.utc)
            if report.updated:
                self.store.upsert_many(report.updated.items(), finished_at)
                for sensor_id, celsius in report.updated.items():
                    self.metrics.record_update(sensor_id, celsius, finished_at)

            report.finished_at = finished_at
            elapsed = time.perf_counter() - start_time
            self.metrics.record_cycle(elapsed)
            logger.info(
                "Sampling cycle finished",
                extra={
                    "device_count": report.device_count,
                    "updated_count": report.updated_count,
                    "error_count": report.error_count,
                    "cycle_ms": int(elapsed * 1000),
                },
            )
        finally:
            self.state = SamplerState.idle
        self.last_report = report
        return report

    def start(self) -> None:
        """Launch the background polling thread.

        A no-op while a polling thread is alive, including one that was asked
        to stop but has not finished its current cycle yet, so there is never
        more than one writer.
        """
        with self._start_lock:
            if self._thread is not None and self._thread.is_alive():
                if self._stop_event.is_set():
                    logger.warning(
                        "Previous sampler thread is still finishing; not starting another",
                        extra={"device_path": str(self.devices_root)},
                    )
                return
            stop_event = threading.Event()
            self._stop_event = stop_event
            self._thread = threading.Thread(
                target=self._run,
                args=(stop_event,),
                name="TemperatureSampler",
                daemon=True,
            )
            self._thread.start()
        logger.info(
            "Temperature sampler started",
            extra={"device_path": str(self.devices_root)},
        )

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        """Stop the polling thread at process shutdown."""
        with self._start_lock:
            self._stop_event.set()
            thread = self._thread
        if thread is None:
            return
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning(
                "Sampler thread did not stop within timeout",
                extra={"device_path": str(self.devices_root)},
            )
            return
        with self._start_lock:
            if self._thread is thread:
                self._thread = None

    @property
    def running(self) -> bool:
        """True while a polling thread is alive and has not been asked to stop."""
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            try:
                self.run_cycle()
            except Exception:  # noqa: BLE001 - the loop must outlive any single cycle
                logger.exception("Unexpected error during sampling cycle")
            stop_event.wait(self.interval_seconds)
