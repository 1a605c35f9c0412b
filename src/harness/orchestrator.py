"""Orchestrator — runs the configured test cases one after another.

Per case
────────
  Created    — report file created, dataset opened (failures abort the run)
  Running    — ``concurrency`` producers fire until ``duration`` elapses
  Draining   — fixed extra wait so in-flight deliveries and the cluster's
               asynchronous notifications can surface; producers are joined
  Reporting  — fired + received streams merged chronologically and written,
               summary written, receiver log reset
  Done

After the last case the completion signal fires, exactly once.  A fatal
delivery error stops the run where it happened; the partial report is left
as is and the error propagates to the caller.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from collections.abc import Callable, Sequence
from pathlib import Path

import httpx

from src.contracts.event import Event
from src.contracts.testcase import TestCaseConfig
from src.harness.merger import merge_events
from src.harness.reporter import summarize, write_report, write_summary
from src.loadgen.dataset import Parser, open_dataset
from src.loadgen.exposition import parse_exposition
from src.loadgen.loadtest import LoadTest
from src.receiver.receiver import NotificationReceiver
from src.shared.metrics import HarnessMetrics

log = logging.getLogger(__name__)

DEFAULT_DRAIN_SEC = 10.0
DEFAULT_RESULTS_DIR = "test_results"


class CaseState(str, enum.Enum):
    CREATED = "created"
    RUNNING = "running"
    DRAINING = "draining"
    REPORTING = "reporting"
    DONE = "done"


class Orchestrator:
    def __init__(
        self,
        cases: Sequence[TestCaseConfig],
        receiver: NotificationReceiver,
        metrics: HarnessMetrics,
        results_dir: str | Path = DEFAULT_RESULTS_DIR,
        drain_sec: float = DEFAULT_DRAIN_SEC,
        delivery_timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
        parse: Parser = parse_exposition,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        self.cases = tuple(cases)
        self.receiver = receiver
        self.metrics = metrics
        self.results_dir = Path(results_dir)
        self.drain_sec = drain_sec
        self.delivery_timeout = delivery_timeout
        self.transport = transport
        self.parse = parse
        self.on_complete = on_complete
        self.done = threading.Event()
        self.states: dict[str, CaseState] = {}
        self._started = False

    def report_path(self, case: TestCaseConfig) -> Path:
        return self.results_dir / case.name / "report"

    def summary_path(self, case: TestCaseConfig) -> Path:
        return self.results_dir / case.name / "summary.csv"

    def run(self) -> None:
        """Run every case in order, then signal completion.

        Raises:
            RuntimeError: If called more than once.
            OSError: Dataset or report file could not be opened.
            HarnessError: A delivery failed or the dataset ran out.
        """
        if self._started:
            raise RuntimeError("orchestrator already ran")
        self._started = True

        with httpx.Client(transport=self.transport, timeout=self.delivery_timeout) as client:
            for case in self.cases:
                self.run_case(case, client)

        log.info("All %d load test(s) finished", len(self.cases))
        self.done.set()
        if self.on_complete is not None:
            self.on_complete()

    def run_case(self, case: TestCaseConfig, client: httpx.Client) -> list[Event]:
        """Drive one case through its states; return the merged events written."""
        self._set_state(case, CaseState.CREATED)
        report_path = self.report_path(case)
        report_path.parent.mkdir(parents=True, exist_ok=True)

        with report_path.open("w", encoding="utf-8") as report, open_dataset(
            case.dataset_file, parse=self.parse
        ) as dataset:
            lt = LoadTest(case, dataset, client, self.metrics)

            self._set_state(case, CaseState.RUNNING)
            lt.run()
            if lt.error is not None:
                lt.join()
                raise lt.error

            self._set_state(case, CaseState.DRAINING)
            time.sleep(self.drain_sec)
            lt.join()
            if lt.error is not None:
                raise lt.error

            self._set_state(case, CaseState.REPORTING)
            events = merge_events([*lt.events(), self.receiver.events()])
            lines = write_report(events, report)

        write_summary(summarize(events), self.summary_path(case))
        dropped = self.receiver.reset()
        log.info(
            "Wrote report → %s (%d events, %d notifications)", report_path, lines, dropped
        )
        self._set_state(case, CaseState.DONE)
        return events

    def _set_state(self, case: TestCaseConfig, state: CaseState) -> None:
        self.states[case.name] = state
        log.debug("Case %s → %s", case.name, state.value)
