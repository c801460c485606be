from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from prometheus_client import CollectorRegistry

from datastore.state_store import SensorStateStore
from metrics.registry import MetricRegistry
from services.sampler import Sampler
from settings import Settings, get_settings


@dataclass
class MonitorContext:
    """Everything the sampler and the HTTP layer share, built once at startup."""

    settings: Settings
    store: SensorStateStore
    metrics: MetricRegistry
    sampler: Sampler


def build_context(
    settings: Optional[Settings] = None,
    registry: Optional[CollectorRegistry] = None,
) -> MonitorContext:
    """Wire a store, metric registry and sampler from ``settings``."""
    resolved = settings or get_settings()
    store = SensorStateStore()
    metrics = MetricRegistry(registry)
    sampler = Sampler(
        devices_root=resolved.devices_path,
        store=store,
        metrics=metrics,
        interval_seconds=resolved.sample_interval,
    )
    return MonitorContext(settings=resolved, store=store, metrics=metrics, sampler=sampler)
