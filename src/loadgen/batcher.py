"""AlertBatcher — rotating dataset window turned into alerts.

The same window ``[cursor, cursor + batch_size)`` is served for exactly
``rotation_interval`` consecutive calls, then the cursor moves forward by one
batch width.  The resulting sawtooth (repeat, advance, repeat) exercises both
deduplication of known alerts and handling of new ones.
"""

from __future__ import annotations

from src.contracts.alert import Alert
from src.loadgen.dataset import Dataset


class AlertBatcher:
    def __init__(
        self,
        dataset: Dataset,
        batch_size: int,
        rotation_interval: int,
        cursor: int = 0,
    ) -> None:
        if batch_size <= 0 or rotation_interval <= 0:
            raise ValueError("batch_size and rotation_interval must be positive")
        self.dataset = dataset
        self.batch_size = batch_size
        self.rotation_interval = rotation_interval
        self.cursor = cursor
        self.calls_since_rotation = 0

    def window(self) -> tuple[int, int]:
        return self.cursor, self.cursor + self.batch_size

    def next_batch(self) -> list[Alert]:
        if self.calls_since_rotation == self.rotation_interval:
            self.cursor += self.batch_size
            self.calls_since_rotation = 0

        start, stop = self.window()
        alerts = [Alert(labels=dict(ls)) for ls in self.dataset.get(start, stop)]
        self.calls_since_rotation += 1
        return alerts
