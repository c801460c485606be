"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from app.schemas import CycleSummary, HealthStatus, TemperatureReading
from services.context import MonitorContext

router = APIRouter()


def get_context(request: Request) -> MonitorContext:
    return request.app.state.context


@router.get(
    "/metrics",
    summary="Prometheus exposition of every sensor gauge.",
    response_class=Response,
)
def metrics(context: MonitorContext = Depends(get_context)) -> Response:
    return Response(
        content=context.metrics.render_all(),
        media_type=context.metrics.content_type,
    )


@router.get(
    "/temperatures",
    response_model=list[TemperatureReading],
    summary="Last known temperature of every sensor, ordered by sensor id.",
)
def list_temperatures(
    context: MonitorContext = Depends(get_context),
) -> list[TemperatureReading]:
    return [TemperatureReading.from_state(state) for state in context.store.snapshot()]


@router.get(
    "/temperatures/{sensor_id}",
    response_model=TemperatureReading,
    summary="Last known temperature of a single sensor.",
)
def get_temperature(
    sensor_id: str,
    context: MonitorContext = Depends(get_context),
) -> TemperatureReading:
    state = context.store.get(sensor_id)
    if state is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No reading recorded for sensor {sensor_id!r}.",
        )
    return TemperatureReading.from_state(state)


@router.get(
    "/health",
    response_model=HealthStatus,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
def healthcheck(context: MonitorContext = Depends(get_context)) -> HealthStatus:
    report = context.sampler.last_report
    return HealthStatus(
        sensors=len(context.store),
        sampler_state=context.sampler.state.value,
        last_cycle=CycleSummary.from_report(report) if report is not None else None,
    )


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
