"""Shared data structures: alerts, fingerprints, report events, test cases."""

from src.contracts.alert import Alert, LabelSet
from src.contracts.event import Event, FiredEvent, ReceivedNotification
from src.contracts.testcase import TestCaseConfig

__all__ = [
    "Alert",
    "Event",
    "FiredEvent",
    "LabelSet",
    "ReceivedNotification",
    "TestCaseConfig",
]
