"""Order-independent alert identity hashing.

Per alert
─────────
    Label pairs are sorted by name and serialised as
    ``name 0xFF value 0xFF`` (UTF-8 never contains the 0xFF byte), then
    hashed with XXH64 (seed 0).  Label insertion order is irrelevant.

Per alert set
─────────────
    The XOR of the member hashes.  Alert order is irrelevant and an even
    number of identical alerts cancels out: ``fingerprint(A + A) == 0``.
    The value is a fast equality check between fired and notified sets,
    not an integrity digest.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import xxhash

from src.contracts.alert import Alert

_SEP = b"\xff"


def hash_labels(labels: Mapping[str, str]) -> int:
    """Return the 64-bit hash of one label set."""
    buf = bytearray()
    for name in sorted(labels):
        buf += name.encode("utf-8")
        buf += _SEP
        buf += labels[name].encode("utf-8")
        buf += _SEP
    return xxhash.xxh64_intdigest(bytes(buf))


def hash_alert(alert: Alert) -> int:
    return hash_labels(alert.labels)


def alert_hashes(alerts: Iterable[Alert]) -> list[int]:
    """Hash every alert, keeping input order."""
    return [hash_alert(a) for a in alerts]


def combine(hashes: Iterable[int]) -> int:
    """Fold per-alert hashes into one set fingerprint (XOR)."""
    result = 0
    for h in hashes:
        result ^= h
    return result


def fingerprint(alerts: Iterable[Alert]) -> int:
    return combine(alert_hashes(alerts))
