from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

import typer
import uvicorn

from app.main import create_app
from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_scan, render_temperatures
from logging_config import configure_logging
from sensors.devices import list_sensor_devices
from sensors.errors import EnumerationFailed, ReadError
from sensors.reader import read_temperature
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig


app = typer.Typer(
    help="Serve and inspect one-wire temperature sensor readings.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Exporter base URL (defaults to API_BASE_URL env or http://localhost:9091).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for HTTP responses.",
    ),
) -> None:
    """Entry point for the CLI."""
    ctx.obj = CLIState(config=load_config(base_url=base_url, timeout=timeout))


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind (HTTP_HOST)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", min=1, max=65535, help="TCP port (HTTP_PORT)."),
    devices_path: Optional[Path] = typer.Option(
        None, "--devices-path", help="One-wire devices directory (W1_DEVICES_PATH)."
    ),
    interval: Optional[float] = typer.Option(
        None, "--interval", min=0.001, help="Seconds between sampling cycles (SAMPLE_INTERVAL_SECONDS)."
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (LOG_LEVEL)."),
) -> None:
    """Run the exporter HTTP service with its background sampler."""
    settings = get_settings()
    overrides: Dict[str, object] = {}
    if host is not None:
        overrides["http_host"] = host
    if port is not None:
        overrides["http_port"] = port
    if devices_path is not None:
        overrides["devices_path"] = str(devices_path)
    if interval is not None:
        overrides["sample_interval"] = interval
    if log_level is not None:
        overrides["log_level"] = log_level.upper()
    settings = replace(settings, **overrides)

    configure_logging(settings.log_level)
    application = create_app(settings)
    uvicorn.run(
        application,
        host=settings.http_host,
        port=settings.http_port,
        log_config=None,
    )


@app.command("scan")
def scan_command(
    devices_path: Optional[Path] = typer.Option(
        None, "--devices-path", help="One-wire devices directory (W1_DEVICES_PATH)."
    ),
) -> None:
    """Read every sensor once, locally, and print the results."""
    root = devices_path or Path(get_settings().devices_path)
    try:
        devices = list_sensor_devices(root)
    except EnumerationFailed as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    readings: Dict[str, float] = {}
    errors: Dict[str, str] = {}
    for device in devices:
        try:
            readings[device.sensor_id] = read_temperature(device.path)
        except ReadError as exc:
            errors[device.sensor_id] = exc.reason
    render_scan(readings, errors)


@app.command("temperatures")
def temperatures_command(
    ctx: typer.Context,
    sensor_id: Optional[str] = typer.Argument(None, help="Only show this sensor."),
) -> None:
    """Fetch the latest readings from a running exporter."""
    state = _get_state(ctx)
    client = ApiClient(state.config)
    ctx.call_on_close(client.close)
    if sensor_id is None:
        render_temperatures(client.list_temperatures())
    else:
        render_temperatures([client.get_temperature(sensor_id)])
