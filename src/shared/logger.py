"""Налаштування логування."""

from __future__ import annotations

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Налаштовує кореневий логер з лаконічним форматом.

    Access-лог uvicorn піднімається щонайменше до WARNING, інакше кожен
    webhook-виклик засмічує вивід.

    Args:
        level: Рівень логування (DEBUG, INFO, WARNING, ERROR).
    """
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(max(numeric, logging.WARNING))
