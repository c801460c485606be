from __future__ import annotations

from typing import Any, Dict, List

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for a running exporter."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def list_temperatures(self) -> List[Dict[str, Any]]:
        try:
            response = self._client.get("/temperatures")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            self._handle_transport_error(exc)
        payload = response.json()
        if not isinstance(payload, list):
            raise typer.BadParameter("Unexpected response payload when listing temperatures.")
        return payload

    def get_temperature(self, sensor_id: str) -> Dict[str, Any]:
        try:
            response = self._client.get(f"/temperatures/{sensor_id}")
            if response.status_code == 404:
                raise typer.BadParameter(f"Sensor {sensor_id} has no reading.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            self._handle_transport_error(exc)
        return response.json()

    def _handle_transport_error(self, exc: httpx.TransportError) -> None:
        typer.secho(
            f"Cannot reach {self._config.base_url}: {exc}",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
