"""Звітування: хронологічний звіт кейсу та підсумок верифікації (CSV)."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

import pandas as pd

from src.contracts.event import Event, FiredEvent, ReceivedNotification
from src.contracts.fingerprint import alert_hashes

log = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "alert_hash",
    "fired",
    "notified",
    "first_fired",
    "first_notified",
    "delay_sec",
    "observed",
]


def write_report(events: Iterable[Event], out: TextIO) -> int:
    """Write one rendered line per event; return the number of lines."""
    count = 0
    for ev in events:
        out.write(ev.to_report_line() + "\n")
        count += 1
    out.flush()
    return count


# ═══════════════════════════════════════════════════════════════════════════
#  Verification summary
# ═══════════════════════════════════════════════════════════════════════════


def _rows(events: Iterable[Event]) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for ev in events:
        if isinstance(ev, FiredEvent):
            hashes, kind = alert_hashes(ev.alerts), "fired"
        elif isinstance(ev, ReceivedNotification):
            hashes, kind = ev.alert_hashes, "notified"
        else:
            raise TypeError(f"unexpected event type: {type(ev).__name__}")
        for h in hashes:
            rows.append({"alert_hash": f"{h:x}", "kind": kind, "ts": ev.timestamp})
    return rows


def _column(frame: pd.DataFrame, name: str, default: object) -> pd.Series:
    if name in frame.columns:
        return frame[name]
    if default is pd.NaT:
        return pd.Series(pd.NaT, index=frame.index, dtype="datetime64[ns, UTC]")
    return pd.Series(default, index=frame.index)


def summarize(events: Iterable[Event]) -> pd.DataFrame:
    """Per alert hash: how often it was fired and notified, and the first delay.

    ``delay_sec`` is the time from the first delivery to the first
    notification carrying the alert; it is empty for alerts never observed.
    """
    rows = _rows(events)
    if not rows:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df = pd.DataFrame(rows)
    df["ts"] = pd.to_datetime(df["ts"], unit="ns", utc=True)
    grouped = df.groupby(["alert_hash", "kind"])["ts"]
    counts = grouped.size().unstack("kind", fill_value=0)
    firsts = grouped.min().unstack("kind")

    summary = pd.DataFrame(
        {
            "fired": _column(counts, "fired", 0).astype(int),
            "notified": _column(counts, "notified", 0).astype(int),
            "first_fired": _column(firsts, "fired", pd.NaT),
            "first_notified": _column(firsts, "notified", pd.NaT),
        }
    )
    summary["delay_sec"] = (
        summary["first_notified"] - summary["first_fired"]
    ).dt.total_seconds()
    summary["observed"] = summary["notified"] > 0
    summary.index.name = "alert_hash"
    summary = summary.reset_index().sort_values(["first_fired", "alert_hash"])
    return summary[SUMMARY_COLUMNS].reset_index(drop=True)


def write_summary(summary: pd.DataFrame, path: str | Path) -> None:
    """Атомарно записує *summary* як CSV."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            summary.to_csv(fh, index=False)
        os.replace(tmp, target)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise

    fired = int((summary["fired"] > 0).sum())
    missing = int(((summary["fired"] > 0) & ~summary["observed"].astype(bool)).sum())
    log.info("Wrote summary → %s (%d alerts fired, %d never notified)", target, fired, missing)
