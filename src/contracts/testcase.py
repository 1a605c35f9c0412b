"""Test-case configuration — one independent load run and its report."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class TestCaseConfig:
    """Immutable description of one load test.

    Durations are in seconds.  ``targets`` is filled in by the CLI from the
    normalised ``--alertmanagers`` list; the YAML file does not carry it.
    """

    __test__ = False  # not a pytest class

    name: str
    duration: float
    concurrency: int
    batch_size: int
    rotation_interval: int
    fire_interval: float
    dataset_file: str
    targets: tuple[str, ...] = field(default_factory=tuple)
