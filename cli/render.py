from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def render_temperatures(payload: Iterable[Dict[str, Any]]) -> None:
    readings = list(payload)
    echo_heading("Temperatures")
    if not readings:
        typer.echo("No sensor readings recorded yet.")
        return
    for reading in readings:
        typer.echo(
            f"  - {reading.get('sensor_id')}: {reading.get('celsius')} °C"
            f" (updated {reading.get('last_updated')})"
        )


def render_scan(readings: Mapping[str, float], errors: Mapping[str, str]) -> None:
    echo_heading("Sensors")
    if not readings and not errors:
        typer.echo("No temperature sensors found.")
        return
    for sensor_id in sorted({*readings, *errors}):
        if sensor_id in readings:
            typer.echo(f"  - {sensor_id}: {readings[sensor_id]:.3f} °C")
        else:
            typer.secho(f"  - {sensor_id}: error: {errors[sensor_id]}", fg=typer.colors.RED)
