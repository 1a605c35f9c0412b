"""LoadProducer — один ритм відправки на всі налаштовані цілі.

На кожному тіку береться один батч з AlertBatcher продюсера, кодується один
раз і той самий body надсилається POST-ом на всі цілі в порядку з конфігу.
Кожна доставка, що отримала HTTP-відповідь (з будь-яким статусом), стає
FiredEvent.

Тіки, що настали під час незавершеного циклу, відкидаються, а не ставляться
в чергу: повільна ціль сповільнює свого продюсера замість накопичення
беклогу.  Скасування перевіряється лише між циклами, тож розпочатий цикл
завжди завершується.

Будь-яка помилка циклу (збій доставки, датасет без наступного вікна,
непередбачений виняток) завершує весь прогін: помилка як HarnessError
передається в ``on_fatal``, і продюсер зупиняється.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from collections.abc import Callable, Sequence

import httpx

from src.contracts.alert import Alert
from src.contracts.event import FiredEvent
from src.loadgen.batcher import AlertBatcher
from src.shared.errors import DeliveryError, HarnessError
from src.shared.metrics import HarnessMetrics

log = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}


def encode_alerts(alerts: list[Alert]) -> bytes:
    return json.dumps([a.to_dict() for a in alerts], separators=(",", ":")).encode("utf-8")


class LoadProducer:
    def __init__(
        self,
        batcher: AlertBatcher,
        client: httpx.Client,
        targets: Sequence[str],
        fire_interval: float,
        metrics: HarnessMetrics,
        name: str = "producer-0",
        on_fatal: Callable[[HarnessError], None] | None = None,
    ) -> None:
        if fire_interval <= 0:
            raise ValueError("fire_interval must be positive")
        self.batcher = batcher
        self.client = client
        self.targets = list(targets)
        self.fire_interval = fire_interval
        self.metrics = metrics
        self.name = name
        self.on_fatal = on_fatal
        self.error: HarnessError | None = None
        self.cycles = 0
        self.dropped_ticks = 0
        self._events: list[FiredEvent] = []

    # ── public API ───────────────────────────────────────────────────────

    def run(self, stop: threading.Event) -> None:
        """Fire on every tick until *stop* is set or a cycle fails."""
        next_tick = time.monotonic() + self.fire_interval
        while not stop.wait(max(0.0, next_tick - time.monotonic())):
            try:
                self.fire()
            except httpx.RequestError as exc:
                error = DeliveryError(f"{self.name}: delivery failed: {exc!r}")
                error.__cause__ = exc
                self._fail(error)
                return
            except HarnessError as exc:
                self._fail(exc)
                return
            except Exception as exc:
                log.exception("%s: unexpected error in firing cycle", self.name)
                error = HarnessError(f"{self.name}: firing cycle crashed: {exc!r}")
                error.__cause__ = exc
                self._fail(error)
                return
            next_tick = self._advance(next_tick)

        log.debug(
            "%s stopped after %d cycles (%d ticks dropped)",
            self.name, self.cycles, self.dropped_ticks,
        )

    def fire(self) -> None:
        """Run one firing cycle: one batch, delivered to every target."""
        alerts = self.batcher.next_batch()
        body = encode_alerts(alerts)
        for target in self.targets:
            resp = self.client.post(target, content=body, headers=_JSON_HEADERS)
            self.metrics.alerts_fired.labels(target, str(resp.status_code)).inc()
            self._events.append(
                FiredEvent(target=target, alerts=alerts, timestamp=time.time_ns())
            )
            if resp.status_code >= 400:
                log.warning("%s: %s answered %d", self.name, target, resp.status_code)
        self.cycles += 1

    def events(self) -> list[FiredEvent]:
        """FiredEvents in firing order."""
        return list(self._events)

    # ── internals ────────────────────────────────────────────────────────

    def _advance(self, next_tick: float) -> float:
        next_tick += self.fire_interval
        now = time.monotonic()
        if next_tick < now:
            missed = int((now - next_tick) // self.fire_interval) + 1
            self.dropped_ticks += missed
            next_tick += missed * self.fire_interval
        return next_tick

    def _fail(self, error: HarnessError) -> None:
        log.error("%s aborting load test: %s", self.name, error)
        self.error = error
        if self.on_fatal is not None:
            self.on_fatal(error)
