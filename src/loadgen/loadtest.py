"""LoadTest — один конкурентний прогін окремого тест-кейсу."""

from __future__ import annotations

import logging
import threading

import httpx

from src.contracts.event import FiredEvent
from src.contracts.testcase import TestCaseConfig
from src.loadgen.batcher import AlertBatcher
from src.loadgen.dataset import Dataset
from src.loadgen.producer import LoadProducer
from src.shared.errors import HarnessError
from src.shared.metrics import HarnessMetrics

log = logging.getLogger(__name__)


class LoadTest:
    """Runs ``config.concurrency`` producers over one shared dataset.

    Producer ``i`` starts its window at ``i * batch_size``.  All producers
    share one cancellation token, set when ``duration`` elapses or as soon as
    any producer hits a fatal error.
    """

    def __init__(
        self,
        config: TestCaseConfig,
        dataset: Dataset,
        client: httpx.Client,
        metrics: HarnessMetrics,
    ) -> None:
        self.config = config
        self.stop = threading.Event()
        self._error: HarnessError | None = None
        self._error_lock = threading.Lock()
        self._threads: list[threading.Thread] = []
        self.producers = [
            LoadProducer(
                batcher=AlertBatcher(
                    dataset,
                    config.batch_size,
                    config.rotation_interval,
                    cursor=i * config.batch_size,
                ),
                client=client,
                targets=config.targets,
                fire_interval=config.fire_interval,
                metrics=metrics,
                name=f"{config.name}/producer-{i}",
                on_fatal=self._abort,
            )
            for i in range(config.concurrency)
        ]

    @property
    def error(self) -> HarnessError | None:
        with self._error_lock:
            return self._error

    def start(self) -> None:
        for p in self.producers:
            t = threading.Thread(target=p.run, args=(self.stop,), name=p.name, daemon=True)
            self._threads.append(t)
            t.start()

    def run(self) -> None:
        """Start all producers and block until the deadline or the first fatal error."""
        log.info(
            "Start load test: %s (producers=%d, batch=%d, rotation=%d, every=%.3fs, for=%.1fs)",
            self.config.name,
            self.config.concurrency,
            self.config.batch_size,
            self.config.rotation_interval,
            self.config.fire_interval,
            self.config.duration,
        )
        self.start()
        aborted = self.stop.wait(self.config.duration)
        self.stop.set()
        if aborted:
            log.error("Load test aborted: %s", self.config.name)
        else:
            log.info("Load test done: %s", self.config.name)

    def join(self) -> None:
        """Wait for every producer to finish its in-flight cycle."""
        for t in self._threads:
            t.join()

    def events(self) -> list[list[FiredEvent]]:
        """One FiredEvent stream per producer, each in firing order."""
        return [p.events() for p in self.producers]

    def _abort(self, error: HarnessError) -> None:
        with self._error_lock:
            if self._error is None:
                self._error = error
        self.stop.set()
