from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_DEVICES_PATH_ENV = "W1_DEVICES_PATH"
_SAMPLE_INTERVAL_ENV = "SAMPLE_INTERVAL_SECONDS"
_HTTP_HOST_ENV = "HTTP_HOST"
_HTTP_PORT_ENV = "HTTP_PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    devices_path: str
    sample_interval: float
    http_host: str
    http_port: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_interval(default: float) -> float:
    value = os.getenv(_SAMPLE_INTERVAL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_port(default: int) -> int:
    value = os.getenv(_HTTP_PORT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        devices_path=_read_str_env(_DEVICES_PATH_ENV, "/sys/bus/w1/devices"),
        sample_interval=_read_interval(60.0),
        http_host=_read_str_env(_HTTP_HOST_ENV, "0.0.0.0"),
        http_port=_read_port(9091),
        log_level=_read_log_level("INFO"),
    )
