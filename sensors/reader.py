"""Read DS18B20-family sensors through the kernel ``w1_slave`` interface."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Union

from sensors.errors import MalformedContent, MissingFile, ParseError

STATUS_FILENAME = "w1_slave"
_TEMPERATURE_FIELD = "t="
_INTEGER = re.compile(r"[+-]?\d+")
# The kernel driver reports millidegrees as a signed 32-bit integer.
_MIN_MILLIDEGREES = -(2**31)
_MAX_MILLIDEGREES = 2**31 - 1


def parse_temperature(content: str, path: Union[str, Path] = STATUS_FILENAME) -> float:
    """Extract the Celsius value from the raw text of a ``w1_slave`` file.

    The kernel writes two lines; the second ends with ``t=<millidegrees>``::

        72 01 4b 46 7f ff 0e 10 57 : crc=57 YES
        72 01 4b 46 7f ff 0e 10 57 t=23125

    Raises:
        MalformedContent: fewer than two lines, or no ``t=`` on the second one.
        ParseError: the token after ``t=`` is not a 32-bit signed integer.
    """
    lines = [line.rstrip("\r") for line in content.split("\n")]
    if len(lines) < 2:
        raise MalformedContent(path, "temperature line not found")

    _, marker, remainder = lines[1].partition(_TEMPERATURE_FIELD)
    if not marker:
        raise MalformedContent(path, "temperature field not found")

    tokens = remainder.split()
    token = tokens[0] if tokens else ""
    if not _INTEGER.fullmatch(token):
        raise ParseError(path, f"invalid temperature value {token[:32]!r}")

    try:
        millidegrees = int(token)
    except ValueError as exc:
        raise ParseError(path, f"invalid temperature value {token[:32]!r}") from exc
    if not _MIN_MILLIDEGREES <= millidegrees <= _MAX_MILLIDEGREES:
        raise ParseError(path, f"temperature value out of range {token[:32]!r}")

    return millidegrees / 1000.0


def read_temperature(device_path: Union[str, Path]) -> float:
    """Read one device directory and return its temperature in degrees Celsius."""
    status_path = Path(device_path) / STATUS_FILENAME
    try:
        content = status_path.read_text(encoding="ascii", errors="replace")
    except OSError as exc:
        raise MissingFile(status_path, exc.strerror or type(exc).__name__) from exc
    return parse_temperature(content, status_path)
