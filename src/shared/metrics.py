"""Prometheus counters exported by the harness on a dedicated registry."""

from __future__ import annotations

from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter


@dataclass(slots=True)
class HarnessMetrics:
    registry: CollectorRegistry
    alerts_fired: Counter
    notifications_received: Counter


def build_metrics(registry: CollectorRegistry | None = None) -> HarnessMetrics:
    """Create both counters and register them on *registry* (a fresh one by default)."""
    reg = registry if registry is not None else CollectorRegistry()
    alerts_fired = Counter(
        "alert_load_producer_alerts_fired",
        "Number of alerts fired against Alertmanager instances",
        ["alertmanager", "response_code"],
        registry=reg,
    )
    notifications_received = Counter(
        "notifications_received",
        "Number of notifications received from Alertmanager.",
        ["group_key", "origin", "hash"],
        registry=reg,
    )
    return HarnessMetrics(
        registry=reg,
        alerts_fired=alerts_fired,
        notifications_received=notifications_received,
    )
