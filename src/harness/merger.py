"""Chronological merge of per-stream event sequences.

Every input stream is already sorted by timestamp.  At each step the stream
whose head has the strictly smallest timestamp is emitted; on equal
timestamps the earliest-listed stream wins, so the output order is fully
determined by the input order.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from src.contracts.event import Event

E = TypeVar("E", bound=Event)


def merge_events(streams: Sequence[Sequence[E]]) -> list[E]:
    """Merge sorted *streams* into one ascending sequence."""
    live = [s for s in streams if s]
    cursors = [0] * len(live)
    merged: list[E] = []

    while live:
        best = 0
        for i in range(1, len(live)):
            if live[i][cursors[i]].timestamp < live[best][cursors[best]].timestamp:
                best = i
        merged.append(live[best][cursors[best]])
        cursors[best] += 1
        if cursors[best] == len(live[best]):
            del live[best]
            del cursors[best]

    return merged
