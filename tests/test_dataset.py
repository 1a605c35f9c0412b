"""Tests for src.loadgen.dataset and src.loadgen.exposition."""

from __future__ import annotations

import threading

import pytest

from src.loadgen.dataset import Dataset, open_dataset
from src.loadgen.exposition import parse_exposition
from src.shared.errors import DatasetError, DatasetExhaustedError
from tests.conftest import exposition_lines, write_dataset


class CountingLines:
    """Line iterator that records how many lines were pulled."""

    def __init__(self, lines: list[bytes]) -> None:
        self._it = iter(lines)
        self.pulled = 0

    def __iter__(self):
        return self

    def __next__(self) -> bytes:
        line = next(self._it)
        self.pulled += 1
        return line


class CountingParser:
    def __init__(self) -> None:
        self.calls: list[bytes] = []

    def __call__(self, data: bytes):
        self.calls.append(data)
        return parse_exposition(data)


# ═══════════════════════════════════════════════════════════════════════════
#  parse_exposition
# ═══════════════════════════════════════════════════════════════════════════


class TestParseExposition:
    def test_sample_becomes_labelset_with_name(self):
        out = parse_exposition(b'up{job="node",instance="a:9100"} 1\n')
        assert out == [{"__name__": "up", "job": "node", "instance": "a:9100"}]

    def test_metric_without_labels(self):
        assert parse_exposition(b"process_start_time_seconds 17\n") == [
            {"__name__": "process_start_time_seconds"}
        ]

    def test_comments_and_blank_lines_skipped(self):
        data = b"# HELP up Target up.\n# TYPE up gauge\n\nup{job=\"a\"} 1\n"
        assert parse_exposition(data) == [{"__name__": "up", "job": "a"}]

    def test_order_preserved(self):
        out = parse_exposition(b"".join(exposition_lines(5)))
        assert [ls["instance"] for ls in out] == [f"node-{i:04d}" for i in range(5)]

    def test_empty_input(self):
        assert parse_exposition(b"") == []


# ═══════════════════════════════════════════════════════════════════════════
#  Dataset
# ═══════════════════════════════════════════════════════════════════════════


class TestDatasetGrowth:
    def test_first_get_reads_exactly_requested_lines(self):
        lines = CountingLines(exposition_lines(50))
        ds = Dataset(lines)
        got = ds.get(0, 10)
        assert len(got) == 10
        assert lines.pulled == 10
        assert len(ds) == 10

    def test_second_window_grows_once_without_rereading(self):
        lines = CountingLines(exposition_lines(50))
        parser = CountingParser()
        ds = Dataset(lines, parse=parser)

        ds.get(0, 10)
        ds.get(10, 20)

        assert lines.pulled == 20
        assert len(parser.calls) == 2
        # the second growth call only saw the ten new lines
        assert parser.calls[1] == b"".join(exposition_lines(10, start=10))

    def test_cached_window_served_without_reading(self):
        lines = CountingLines(exposition_lines(50))
        parser = CountingParser()
        ds = Dataset(lines, parse=parser)
        first = ds.get(0, 10)
        again = ds.get(2, 8)
        assert again == first[2:8]
        assert lines.pulled == 10
        assert len(parser.calls) == 1

    def test_growth_only_pulls_missing_lines(self):
        lines = CountingLines(exposition_lines(50))
        ds = Dataset(lines)
        ds.get(0, 10)
        ds.get(5, 15)
        assert lines.pulled == 15

    def test_window_content(self):
        ds = Dataset(iter(exposition_lines(20)))
        got = ds.get(3, 6)
        assert [ls["instance"] for ls in got] == ["node-0003", "node-0004", "node-0005"]

    def test_crlf_lines_normalised(self):
        parser = CountingParser()
        ds = Dataset(iter([b'a{x="1"} 1\r\n', b'a{x="2"} 1']), parse=parser)
        ds.get(0, 2)
        assert parser.calls[0] == b'a{x="1"} 1\na{x="2"} 1\n'

    def test_empty_window(self):
        lines = CountingLines(exposition_lines(5))
        ds = Dataset(lines)
        assert ds.get(0, 0) == []
        assert lines.pulled == 0

    def test_invalid_window_rejected(self):
        ds = Dataset(iter(exposition_lines(5)))
        with pytest.raises(ValueError):
            ds.get(4, 2)


class TestDatasetFailures:
    def test_exhausted_source(self):
        ds = Dataset(iter(exposition_lines(5)))
        with pytest.raises(DatasetExhaustedError):
            ds.get(0, 10)

    def test_exhausted_keeps_what_was_read(self):
        ds = Dataset(iter(exposition_lines(5)))
        with pytest.raises(DatasetExhaustedError):
            ds.get(0, 10)
        assert len(ds) == 5
        assert len(ds.get(0, 5)) == 5

    def test_comment_lines_count_as_read(self):
        ds = Dataset(iter([b"# HELP a x\n", *exposition_lines(3)]))
        with pytest.raises(DatasetExhaustedError):
            ds.get(0, 4)

    def test_unparseable_lines(self):
        ds = Dataset(iter([b'up{job="a"} not_a_number\n']))
        with pytest.raises(DatasetError):
            ds.get(0, 1)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            with open_dataset(tmp_path / "missing.prom"):
                pass


class TestDatasetConcurrency:
    def test_parallel_readers_parse_each_line_once(self):
        lines = CountingLines(exposition_lines(400))
        parser = CountingParser()
        ds = Dataset(lines, parse=parser)
        results: dict[int, list] = {}

        def worker(i: int) -> None:
            results[i] = ds.get(i * 10, i * 10 + 10)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(40)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ds) == 400
        assert lines.pulled == 400
        for i, got in results.items():
            assert [ls["instance"] for ls in got] == [
                f"node-{j:04d}" for j in range(i * 10, i * 10 + 10)
            ]


class TestOpenDataset:
    def test_reads_file(self, tmp_path):
        path = write_dataset(tmp_path / "d.prom", 12)
        with open_dataset(path) as ds:
            assert len(ds.get(0, 12)) == 12
