"""Shared fixtures and helpers for the alert load harness tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.contracts.alert import Alert
from src.contracts.event import FiredEvent, ReceivedNotification
from src.contracts.testcase import TestCaseConfig
from src.shared.metrics import HarnessMetrics, build_metrics

BASE_TS = 1_772_100_000_000_000_000  # 2026-02-26T10:00:00Z in ns

# ── Helpers ─────────────────────────────────────────────────────────────


def make_alert(**labels: str) -> Alert:
    return Alert(labels=labels or {"alertname": "HighLoad", "instance": "node-01"})


def make_fired(
    *,
    offset_ns: int = 0,
    target: str = "http://am-0:9093/api/v1/alerts",
    alerts: list[Alert] | None = None,
) -> FiredEvent:
    return FiredEvent(
        target=target,
        alerts=alerts if alerts is not None else [make_alert()],
        timestamp=BASE_TS + offset_ns,
    )


def make_notification(
    *,
    offset_ns: int = 0,
    origin: str = "http://am-0:9093",
    group_key: str = "{}:{}",
    alert_hashes: list[int] | None = None,
    notification_hash: int = 0,
) -> ReceivedNotification:
    return ReceivedNotification(
        timestamp=BASE_TS + offset_ns,
        origin=origin,
        group_key=group_key,
        notification_hash=notification_hash,
        alert_hashes=alert_hashes or [],
    )


def exposition_lines(n: int, start: int = 0) -> list[bytes]:
    """*n* distinct exposition sample lines, one label set each."""
    return [
        f'test_alert{{instance="node-{i:04d}",severity="warning"}} 1\n'.encode()
        for i in range(start, start + n)
    ]


def write_dataset(path: Path, n: int) -> Path:
    path.write_bytes(b"".join(exposition_lines(n)))
    return path


def make_case(
    *,
    name: str = "case",
    duration: float = 0.7,
    concurrency: int = 1,
    batch_size: int = 2,
    rotation_interval: int = 1,
    fire_interval: float = 0.2,
    dataset_file: str = "",
    targets: tuple[str, ...] = ("http://am-0:9093/api/v1/alerts",),
) -> TestCaseConfig:
    return TestCaseConfig(
        name=name,
        duration=duration,
        concurrency=concurrency,
        batch_size=batch_size,
        rotation_interval=rotation_interval,
        fire_interval=fire_interval,
        dataset_file=dataset_file,
        targets=targets,
    )


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture
def metrics() -> HarnessMetrics:
    """Counters on a fresh registry, isolated per test."""
    return build_metrics()


@pytest.fixture
def dataset_file(tmp_path: Path) -> Path:
    return write_dataset(tmp_path / "alerts.prom", 200)
