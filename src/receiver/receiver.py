"""NotificationReceiver — ingestion of webhook notifications.

Each inbound call is decoded, fingerprinted and appended to an in-memory log
that the orchestrator reads after every test case and then resets.  A body
that does not decode is logged and dropped; the caller still gets a success
response, because the sender's delivery accounting must not depend on us.
"""

from __future__ import annotations

import logging
import threading
import time

from prometheus_client import Counter
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.contracts.alert import Alert
from src.contracts.event import ReceivedNotification
from src.contracts.fingerprint import alert_hashes, combine

log = logging.getLogger(__name__)


class AlertPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    labels: dict[str, str] = Field(default_factory=dict)


class WebhookPayload(BaseModel):
    """The subset of the Alertmanager webhook body the receiver needs."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    group_key: str = Field(default="", alias="groupKey")
    external_url: str = Field(default="", alias="externalURL")
    alerts: list[AlertPayload] = Field(default_factory=list)


class NotificationReceiver:
    def __init__(self, notifications_received: Counter) -> None:
        self.notifications_received = notifications_received
        self._lock = threading.Lock()
        self._events: list[ReceivedNotification] = []

    def handle(self, body: bytes) -> ReceivedNotification | None:
        """Decode and record one webhook body; ``None`` if it was malformed."""
        try:
            payload = WebhookPayload.model_validate_json(body)
        except ValidationError as exc:
            log.warning("Could not decode notification (%d bytes): %s", len(body), exc)
            return None
        return self.record(payload)

    def record(self, payload: WebhookPayload) -> ReceivedNotification:
        hashes = alert_hashes(Alert(labels=a.labels) for a in payload.alerts)
        notification_hash = combine(hashes)
        self.notifications_received.labels(
            payload.group_key, payload.external_url, f"{notification_hash:x}"
        ).inc()
        event = ReceivedNotification(
            timestamp=time.time_ns(),
            origin=payload.external_url,
            group_key=payload.group_key,
            notification_hash=notification_hash,
            alert_hashes=hashes,
        )
        with self._lock:
            self._events.append(event)
        return event

    def events(self) -> list[ReceivedNotification]:
        """Snapshot of every notification recorded so far, in arrival order."""
        with self._lock:
            return list(self._events)

    def reset(self) -> int:
        """Drop all recorded notifications; return how many there were."""
        with self._lock:
            dropped = len(self._events)
            self._events = []
        return dropped
