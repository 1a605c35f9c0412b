"""Report events — the two record kinds merged into a case report.

``Event`` is a closed union: every member carries an integer ``timestamp``
(nanoseconds since the epoch, UTC) and renders itself to one report line.
The merge step only ever looks at ``timestamp``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.contracts.alert import Alert
from src.contracts.fingerprint import alert_hashes

_NS_PER_SEC = 1_000_000_000


def format_timestamp(ts_ns: int) -> str:
    """Render epoch nanoseconds as ``2026-02-26T10:00:00.000000000Z``."""
    sec, frac = divmod(ts_ns, _NS_PER_SEC)
    dt = datetime.fromtimestamp(sec, tz=UTC)
    return f"{dt.strftime('%Y-%m-%dT%H:%M:%S')}.{frac:09d}Z"


def _hex_list(hashes: list[int]) -> str:
    return "".join(f" {h:x}" for h in hashes)


@dataclass(slots=True, frozen=True)
class FiredEvent:
    """One successful delivery of a batch to one target."""

    target: str
    alerts: list[Alert]
    timestamp: int

    def to_report_line(self) -> str:
        ts = format_timestamp(self.timestamp)
        return f"ALERTS {ts} {self.target}{_hex_list(alert_hashes(self.alerts))}"


@dataclass(slots=True, frozen=True)
class ReceivedNotification:
    """One inbound webhook call from the alert-routing cluster."""

    timestamp: int
    origin: str
    group_key: str
    notification_hash: int
    alert_hashes: list[int] = field(default_factory=list)

    def to_report_line(self) -> str:
        ts = format_timestamp(self.timestamp)
        return (
            f"NOTIFICATION {ts} {self.origin} {self.group_key} "
            f"{self.notification_hash:x}{_hex_list(self.alert_hashes)}"
        )


Event = FiredEvent | ReceivedNotification
