from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from datastore.state_store import SensorStateStore
from metrics.registry import MetricRegistry
from services.sampler import Sampler, SamplerState
from sensors.reader import STATUS_FILENAME


def _write_sensor(root: Path, sensor_id: str, content: str) -> Path:
    device = root / sensor_id
    device.mkdir(parents=True, exist_ok=True)
    (device / STATUS_FILENAME).write_text(content)
    return device


def _reading(millidegrees: int) -> str:
    return f"72 01 4b 46 7f ff 0e 10 57 : crc=57 YES\n72 01 4b 46 7f ff 0e 10 57 t={millidegrees}\n"


def _build_sampler(root: Path, interval: float = 3600.0) -> Sampler:
    return Sampler(
        devices_root=root,
        store=SensorStateStore(),
        metrics=MetricRegistry(),
        interval_seconds=interval,
    )


def test_cycle_publishes_reading_to_store_and_metrics(tmp_path: Path) -> None:
    _write_sensor(tmp_path, "28-aaaa", "abc\nxyz t=23625 def\n")
    sampler = _build_sampler(tmp_path)

    report = sampler.run_cycle()

    assert report.updated == {"28-aaaa": 23.625}
    snapshot = sampler.store.snapshot()
    assert [(state.sensor_id, state.celsius) for state in snapshot] == [("28-aaaa", 23.625)]
    body = sampler.metrics.render_all().decode("utf-8")
    assert 'temperature_celsius{sensor="28-aaaa"} 23.625' in body
    assert sampler.state is SamplerState.idle


def test_bad_sensor_does_not_block_others(tmp_path: Path) -> None:
    _write_sensor(tmp_path, "28-0001", _reading(21000))
    _write_sensor(tmp_path, "28-0002", "garbage")
    _write_sensor(tmp_path, "28-0003", "crc=00 YES\nt=warm\n")
    (tmp_path / "28-0004").mkdir()
    _write_sensor(tmp_path, "28-0005", _reading(-4500))
    sampler = _build_sampler(tmp_path)

    report = sampler.run_cycle()

    assert report.device_count == 5
    assert report.updated == {"28-0001": 21.0, "28-0005": -4.5}
    assert set(report.failed) == {"28-0002", "28-0003", "28-0004"}
    assert [state.sensor_id for state in sampler.store.snapshot()] == ["28-0001", "28-0005"]
    assert sampler.metrics.metric_count == 2
    registry = sampler.metrics.registry
    assert (
        registry.get_sample_value(
            "temperature_sensor_read_errors_total", {"sensor": "28-0004", "reason": "MissingFile"}
        )
        == 1.0
    )
    assert (
        registry.get_sample_value(
            "temperature_sensor_read_errors_total", {"sensor": "28-0003", "reason": "ParseError"}
        )
        == 1.0
    )


def test_non_sensor_entries_are_ignored(tmp_path: Path) -> None:
    _write_sensor(tmp_path, "28-0001", _reading(19000))
    _write_sensor(tmp_path, "10-0001", _reading(99000))
    (tmp_path / "w1_bus_master1").mkdir()
    sampler = _build_sampler(tmp_path)

    report = sampler.run_cycle()

    assert report.device_count == 1
    assert sampler.metrics.sensor_ids() == ["28-0001"]


def test_missing_devices_root_completes_with_zero_updates(tmp_path: Path) -> None:
    sampler = _build_sampler(tmp_path / "missing")

    report = sampler.run_cycle()

    assert report.device_count == 0
    assert report.updated == {}
    assert report.enumeration_error
    assert report.finished_at is not None
    assert sampler.store.snapshot() == []
    assert sampler.metrics.registry.get_sample_value("temperature_sampling_cycles_total") == 1.0


def test_enumeration_failure_keeps_previous_snapshot(tmp_path: Path) -> None:
    root = tmp_path / "devices"
    device = _write_sensor(root, "28-aaaa", _reading(20000))
    sampler = _build_sampler(root)
    sampler.run_cycle()

    (device / STATUS_FILENAME).unlink()
    device.rmdir()
    root.rmdir()
    report = sampler.run_cycle()

    assert report.enumeration_error
    assert [(state.sensor_id, state.celsius) for state in sampler.store.snapshot()] == [
        ("28-aaaa", 20.0)
    ]


def test_consecutive_cycles_with_unchanged_files_are_idempotent(tmp_path: Path) -> None:
    _write_sensor(tmp_path, "28-0001", _reading(20500))
    _write_sensor(tmp_path, "28-0002", _reading(22750))
    sampler = _build_sampler(tmp_path)

    sampler.run_cycle()
    first = sampler.store.snapshot()
    time.sleep(0.01)
    sampler.run_cycle()
    second = sampler.store.snapshot()

    assert [(s.sensor_id, s.celsius) for s in first] == [(s.sensor_id, s.celsius) for s in second]
    assert all(b.last_updated > a.last_updated for a, b in zip(first, second))
    assert sampler.metrics.metric_count == 2


def test_vanished_sensor_keeps_last_value(tmp_path: Path) -> None:
    device = _write_sensor(tmp_path, "28-gone", _reading(18000))
    _write_sensor(tmp_path, "28-stay", _reading(19000))
    sampler = _build_sampler(tmp_path)
    sampler.run_cycle()
    first_update = sampler.store.get("28-gone").last_updated  # type: ignore[union-attr]

    (device / STATUS_FILENAME).unlink()
    device.rmdir()
    report = sampler.run_cycle()

    assert report.device_count == 1
    gone = sampler.store.get("28-gone")
    assert gone is not None
    assert gone.celsius == 18.0
    assert gone.last_updated == first_update


def test_failed_read_after_success_keeps_last_known_value(tmp_path: Path) -> None:
    device = _write_sensor(tmp_path, "28-aaaa", _reading(20000))
    sampler = _build_sampler(tmp_path)
    sampler.run_cycle()

    (device / STATUS_FILENAME).write_text("crc=00 NO\n")
    report = sampler.run_cycle()

    assert "28-aaaa" in report.failed
    assert sampler.store.get("28-aaaa").celsius == 20.0  # type: ignore[union-attr]


@pytest.mark.parametrize("digits", [400, 5000])
def test_oversized_value_does_not_discard_other_readings(tmp_path: Path, digits: int) -> None:
    _write_sensor(tmp_path, "28-0001", _reading(21000))
    _write_sensor(tmp_path, "28-0002", f"crc=57 YES\n00 t={'9' * digits}\n")
    sampler = _build_sampler(tmp_path)

    report = sampler.run_cycle()

    assert report.updated == {"28-0001": 21.0}
    assert set(report.failed) == {"28-0002"}
    assert sampler.store.get("28-0001").celsius == 21.0  # type: ignore[union-attr]
    assert (
        sampler.metrics.registry.get_sample_value(
            "temperature_sensor_read_errors_total", {"sensor": "28-0002", "reason": "ParseError"}
        )
        == 1.0
    )


def test_interval_must_be_positive(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        _build_sampler(tmp_path, interval=0)


def test_background_thread_polls_until_shutdown(tmp_path: Path) -> None:
    _write_sensor(tmp_path, "28-aaaa", _reading(21000))
    sampler = _build_sampler(tmp_path, interval=0.05)

    sampler.start()
    sampler.start()
    try:
        deadline = time.monotonic() + 5.0
        while time.monotonic() < deadline:
            cycles = sampler.metrics.registry.get_sample_value("temperature_sampling_cycles_total")
            if cycles is not None and cycles >= 2:
                break
            time.sleep(0.01)
        else:
            pytest.fail("Sampler did not complete two cycles in time")
        assert sampler.running
    finally:
        sampler.shutdown()

    assert not sampler.running
    assert sampler.store.get("28-aaaa").celsius == 21.0  # type: ignore[union-attr]


def test_unexpected_cycle_error_does_not_stop_the_loop(tmp_path: Path, monkeypatch) -> None:
    sampler = _build_sampler(tmp_path, interval=0.01)
    calls = {"count": 0}
    original = sampler.run_cycle

    def flaky_cycle():
        calls["count"] += 1
        if calls["count"] == 1:
            raise RuntimeError("boom")
        return original()

    monkeypatch.setattr(sampler, "run_cycle", flaky_cycle)

    sampler.start()
    try:
        deadline = time.monotonic() + 5.0
        while sampler.last_report is None and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        sampler.shutdown()

    assert calls["count"] >= 2
    assert sampler.last_report is not None


def test_restart_waits_for_a_thread_that_missed_the_shutdown_timeout(
    tmp_path: Path, monkeypatch
) -> None:
    sampler = _build_sampler(tmp_path, interval=3600.0)
    entered = threading.Event()
    release = threading.Event()

    def hung_cycle():
        entered.set()
        release.wait(5.0)

    monkeypatch.setattr(sampler, "run_cycle", hung_cycle)

    sampler.start()
    assert entered.wait(5.0)
    stuck = sampler._thread
    sampler.shutdown(timeout=0.05)

    assert stuck is not None and stuck.is_alive()
    assert not sampler.running

    sampler.start()
    assert sampler._thread is stuck

    release.set()
    stuck.join(timeout=5.0)
    assert not stuck.is_alive()

    sampler.start()
    try:
        assert sampler.running
        assert sampler._thread is not stuck
    finally:
        sampler.shutdown()

    assert not sampler.running
