"""Завантаження YAML конфігурації навантажувальних тестів та списку цілей."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import yaml

from src.contracts.testcase import TestCaseConfig
from src.shared.errors import ConfigError

log = logging.getLogger(__name__)

DEFAULT_ALERTS_PATH = "/api/v1/alerts"

# Prometheus duration syntax: 1y2w3d4h5m6s7ms, units in descending order
_DURATION_RE = re.compile(
    r"^(?:(\d+)y)?(?:(\d+)w)?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?(?:(\d+)ms)?$"
)
_DURATION_UNITS = (365 * 86400, 7 * 86400, 86400, 3600, 60, 1, 0.001)


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Зчитує YAML файл та повертає його вміст як dict.

    Args:
        path: Шлях до файлу.

    Returns:
        Вміст файлу як словник (порожній файл дає ``{}``).

    Raises:
        FileNotFoundError: Якщо файл не знайдено.
        ConfigError: Якщо YAML не розбирається або верхній рівень не є mapping.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    with p.open("r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigError(f"failed to parse {p}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{p}: top level must be a mapping, got {type(data).__name__}")
    log.debug("Loaded config %s (%d top-level keys)", p.name, len(data))
    return data


def parse_duration(value: str | int | float) -> float:
    """Перетворює ``"1m30s"`` / ``"500ms"`` (або число секунд) на секунди."""
    if isinstance(value, bool):
        raise ConfigError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if text == "0":
        return 0.0
    m = _DURATION_RE.match(text)
    if not text or m is None or not any(m.groups()):
        raise ConfigError(f"invalid duration: {value!r}")
    return sum(int(g) * unit for g, unit in zip(m.groups(), _DURATION_UNITS) if g)


def _positive_int(raw: dict[str, Any], key: str, name: str, *aliases: str) -> int:
    for k in (key, *aliases):
        if k in raw:
            value = raw[k]
            break
    else:
        raise ConfigError(f"load test {name!r}: missing '{key}'")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"load test {name!r}: '{key}' must be a positive integer")
    return value


def _build_testcase(raw: dict[str, Any], idx: int) -> TestCaseConfig:
    name = str(raw.get("name") or "")
    if not name:
        raise ConfigError(f"load test #{idx}: missing 'name'")
    if "dataset_file" not in raw:
        raise ConfigError(f"load test {name!r}: missing 'dataset_file'")
    fire_interval = parse_duration(raw.get("fire_interval", "1s"))
    if fire_interval <= 0:
        raise ConfigError(f"load test {name!r}: 'fire_interval' must be positive")
    return TestCaseConfig(
        name=name,
        duration=parse_duration(raw.get("duration", "1m")),
        concurrency=_positive_int(raw, "concurrency", name, "goroutines"),
        batch_size=_positive_int(raw, "batch_size", name),
        rotation_interval=_positive_int(raw, "rotation_interval", name),
        fire_interval=fire_interval,
        dataset_file=str(raw["dataset_file"]),
    )


def load_testcases(path: str | Path) -> list[TestCaseConfig]:
    """Зчитує ``loadtests:`` з YAML файлу, зберігаючи порядок з конфігу."""
    cfg = load_yaml(path)
    entries = cfg.get("loadtests") or []
    if not isinstance(entries, list):
        raise ConfigError("'loadtests' must be a list")

    cases: list[TestCaseConfig] = []
    seen: set[str] = set()
    for idx, raw in enumerate(entries, 1):
        if not isinstance(raw, dict):
            raise ConfigError(f"load test #{idx} must be a mapping")
        case = _build_testcase(raw, idx)
        if case.name in seen:
            raise ConfigError(f"duplicate load test name {case.name!r}")
        seen.add(case.name)
        cases.append(case)

    log.info("Loaded %d load test(s) from %s", len(cases), path)
    return cases


def normalize_targets(value: str) -> list[str]:
    """Turn a comma-separated list of alert API base URLs into POST endpoints.

    Trailing slashes are stripped from the path; an empty path becomes
    ``/api/v1/alerts``.
    """
    targets: list[str] = []
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        parts = urlsplit(item)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigError(f"invalid alertmanager {item!r}")
        path = parts.path.rstrip("/") or DEFAULT_ALERTS_PATH
        targets.append(urlunsplit((parts.scheme, parts.netloc, path, parts.query, "")))
    return targets
