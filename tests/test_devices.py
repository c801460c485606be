from __future__ import annotations

from pathlib import Path

import pytest

from sensors.devices import list_sensor_devices
from sensors.errors import EnumerationFailed


def test_only_temperature_family_entries_are_listed(tmp_path: Path) -> None:
    for name in ("28-0002", "foo-bar", "28-0001", "00-xyz", "w1_bus_master1"):
        (tmp_path / name).mkdir()

    devices = list_sensor_devices(tmp_path)

    assert [device.sensor_id for device in devices] == ["28-0001", "28-0002"]
    assert devices[0].path == tmp_path / "28-0001"


def test_empty_directory_yields_no_devices(tmp_path: Path) -> None:
    assert list_sensor_devices(tmp_path) == []


def test_missing_root_raises_enumeration_failed(tmp_path: Path) -> None:
    missing = tmp_path / "does-not-exist"

    with pytest.raises(EnumerationFailed) as excinfo:
        list_sensor_devices(missing)

    assert excinfo.value.root == missing


def test_root_that_is_a_file_raises_enumeration_failed(tmp_path: Path) -> None:
    not_a_dir = tmp_path / "devices"
    not_a_dir.write_text("")

    with pytest.raises(EnumerationFailed):
        list_sensor_devices(not_a_dir)
