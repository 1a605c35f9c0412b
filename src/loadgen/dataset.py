"""Dataset — lazy, grow-only cache of label sets read from a line source.

Lines are pulled only when a request reaches past the materialised length,
and exactly as many as are missing.  Materialised entries are never re-read
or re-parsed.  One lock covers both growth and reads, so concurrent
producers never observe a half-grown cache.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Callable, Iterator
from pathlib import Path

from src.contracts.alert import LabelSet
from src.loadgen.exposition import parse_exposition
from src.shared.errors import DatasetError, DatasetExhaustedError

log = logging.getLogger(__name__)

Parser = Callable[[bytes], list[LabelSet]]


class Dataset:
    """Append-only label-set cache over an iterator of raw lines."""

    def __init__(self, lines: Iterator[bytes], parse: Parser = parse_exposition) -> None:
        self._lines = lines
        self._parse = parse
        self._cache: list[LabelSet] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def get(self, start: int, stop: int) -> list[LabelSet]:
        """Return the label sets at ``[start, stop)``, growing the cache if needed.

        Raises:
            DatasetExhaustedError: The source ran dry before ``stop`` entries
                could be materialised.
            DatasetError: The new lines could not be parsed.
        """
        if start < 0 or stop < start:
            raise ValueError(f"invalid dataset window [{start}, {stop})")
        with self._lock:
            if stop > len(self._cache):
                self._grow(stop - len(self._cache))
            if stop > len(self._cache):
                raise DatasetExhaustedError(
                    f"dataset exhausted: requested [{start}, {stop}), "
                    f"only {len(self._cache)} label sets available"
                )
            return self._cache[start:stop]

    def _grow(self, count: int) -> None:
        """Pull *count* lines and parse them in one call. Caller holds the lock."""
        buf = bytearray()
        read = 0
        for line in self._lines:
            buf += line.rstrip(b"\r\n")
            buf += b"\n"
            read += 1
            if read == count:
                break
        if not read:
            return
        try:
            labelsets = self._parse(bytes(buf))
        except ValueError as exc:
            raise DatasetError(f"unparseable dataset lines: {exc}") from exc
        self._cache.extend(labelsets)
        log.debug("Dataset grew by %d lines -> %d label sets", read, len(self._cache))


@contextlib.contextmanager
def open_dataset(path: str | Path, parse: Parser = parse_exposition) -> Iterator[Dataset]:
    """Bind a Dataset to one file handle for the lifetime of the block.

    Raises:
        OSError: If the file cannot be opened.
    """
    with open(path, "rb") as fh:
        log.info("Opened dataset %s", path)
        yield Dataset(iter(fh), parse=parse)
