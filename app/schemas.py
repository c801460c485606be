"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field

from models.records import CycleReport, SensorState


class TemperatureReading(BaseModel):
    """Last known temperature of one sensor."""

    sensor_id: str = Field(..., description="One-wire device directory name, e.g. 28-0316a2795cff.")
    celsius: float
    last_updated: datetime

    @classmethod
    def from_state(cls, state: SensorState) -> "TemperatureReading":
        return cls(
            sensor_id=state.sensor_id,
            celsius=state.celsius,
            last_updated=state.last_updated,
        )


class CycleSummary(BaseModel):
    """Outcome of the most recent sampling cycle."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    device_count: int = Field(..., ge=0)
    updated_count: int = Field(..., ge=0)
    errors: Dict[str, str] = Field(default_factory=dict)
    enumeration_error: Optional[str] = None

    @classmethod
    def from_report(cls, report: CycleReport) -> "CycleSummary":
        return cls(
            started_at=report.started_at,
            finished_at=report.finished_at,
            device_count=report.device_count,
            updated_count=report.updated_count,
            errors=dict(report.failed),
            enumeration_error=report.enumeration_error,
        )


class HealthStatus(BaseModel):
    status: str = "ok"
    sensors: int = Field(..., ge=0)
    sampler_state: str
    last_cycle: Optional[CycleSummary] = None
