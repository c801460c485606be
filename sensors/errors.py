"""Exception hierarchy for sensor access and metric bookkeeping."""

from __future__ import annotations

from pathlib import Path
from typing import Union


class TemperatureMonitorError(Exception):
    """Base class for every error raised by the temperature monitor."""


class EnumerationFailed(TemperatureMonitorError):
    """The one-wire devices root could not be listed."""

    def __init__(self, root: Union[str, Path], reason: str) -> None:
        self.root = Path(root)
        self.reason = reason
        super().__init__(f"Cannot list devices under {str(self.root)!r}: {reason}")


class ReadError(TemperatureMonitorError):
    """A single sensor could not produce a temperature."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{reason} ({self.path})")


class MissingFile(ReadError):
    """The sensor status file is absent or unreadable."""


class MalformedContent(ReadError):
    """The status file lacks a second line or a ``t=`` field."""


class ParseError(ReadError):
    """The value following ``t=`` is not an integer."""


class MetricRegistrationConflict(TemperatureMonitorError):
    """A metric collides with a time series already held by the collector registry."""
