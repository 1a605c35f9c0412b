"""Exception hierarchy shared by the harness modules."""

from __future__ import annotations


class HarnessError(Exception):
    """Base class for every error raised deliberately by the harness."""


class ConfigError(HarnessError):
    """Invalid load-test configuration or target list."""


class DatasetError(HarnessError):
    """The dataset source could not supply valid label sets."""


class DatasetExhaustedError(DatasetError):
    """The dataset source ran out before the requested window was filled."""


class DeliveryError(HarnessError):
    """A target could not be reached; the run is no longer valid."""
