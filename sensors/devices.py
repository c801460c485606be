from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from models.records import DeviceEntry
from sensors.errors import EnumerationFailed

logger = logging.getLogger(__name__)

# One-wire family code for the DS18B20 temperature sensors.
TEMPERATURE_FAMILY_PREFIX = "28-"


def list_sensor_devices(devices_root: Union[str, Path]) -> List[DeviceEntry]:
    """Return temperature sensors currently listed under ``devices_root``, sorted by id."""
    root = Path(devices_root)
    try:
        names = [entry.name for entry in root.iterdir()]
    except OSError as exc:
        raise EnumerationFailed(root, exc.strerror or type(exc).__name__) from exc

    devices = [
        DeviceEntry(sensor_id=name, path=root / name)
        for name in sorted(names)
        if name.startswith(TEMPERATURE_FAMILY_PREFIX)
    ]
    logger.debug(
        "Enumerated one-wire devices",
        extra={"device_path": str(root), "device_count": len(devices)},
    )
    return devices
