"""Exposition-format parser used as the synthetic alert source.

Every sample line of a Prometheus text exposition becomes one label set;
the metric name is kept under ``__name__``.  Comments, ``# HELP`` / ``# TYPE``
lines and blank lines produce nothing.
"""

from __future__ import annotations

from prometheus_client.parser import text_string_to_metric_families

from src.contracts.alert import LabelSet


def parse_exposition(data: bytes) -> list[LabelSet]:
    """Parse raw exposition bytes into label sets, in input order.

    Raises:
        ValueError: On a line the exposition grammar does not accept.
    """
    text = data.decode("utf-8")
    labelsets: list[LabelSet] = []
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            labels: LabelSet = {"__name__": sample.name}
            labels.update(sample.labels)
            labelsets.append(labels)
    return labelsets
