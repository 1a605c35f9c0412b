"""CLI entry-point for the alert load harness.

Usage examples
--------------
# Fire the configured load tests at two Alertmanagers:
python -m src.harness.cli --config loadtests.yaml \
    --alertmanagers http://am-0:9093,http://am-1:9093

# Only receive notifications and expose counters:
python -m src.harness.cli --noload
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import threading

from src.harness.orchestrator import DEFAULT_DRAIN_SEC, DEFAULT_RESULTS_DIR, Orchestrator
from src.receiver.app import ReceiverServer, create_app
from src.receiver.receiver import NotificationReceiver
from src.shared.config_loader import load_testcases, normalize_targets, parse_duration
from src.shared.errors import ConfigError, HarnessError
from src.shared.logger import setup_logging
from src.shared.metrics import build_metrics

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="alert-load-harness",
        description="Fire synthetic alerts at an Alertmanager cluster and verify notifications",
    )
    p.add_argument(
        "--config",
        default="loadtests.yaml",
        help="Load test configuration(s). Default: loadtests.yaml",
    )
    p.add_argument(
        "--alertmanagers",
        default="",
        help="Comma-separated Alertmanager URLs to fire alerts against. "
             "An empty path defaults to /api/v1/alerts.",
    )
    p.add_argument(
        "--noload",
        action="store_true",
        default=False,
        help="Disable load producing; only serve /notify and /metrics.",
    )
    p.add_argument("--listen-host", default="0.0.0.0", help="Default: 0.0.0.0")
    p.add_argument("--listen-port", type=int, default=8080, help="Default: 8080")
    p.add_argument(
        "--results-dir",
        default=DEFAULT_RESULTS_DIR,
        help=f"Directory for per-case reports. Default: {DEFAULT_RESULTS_DIR}/",
    )
    p.add_argument(
        "--drain",
        default=f"{int(DEFAULT_DRAIN_SEC)}s",
        help="Wait after each case before reading notifications. Default: 10s",
    )
    p.add_argument(
        "--delivery-timeout",
        default=None,
        help="Timeout for one delivery (e.g. 30s). Default: none",
    )
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: INFO",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        drain_sec = parse_duration(args.drain)
        timeout = parse_duration(args.delivery_timeout) if args.delivery_timeout else None
        cases = []
        if not args.noload:
            targets = normalize_targets(args.alertmanagers)
            if not targets:
                raise ConfigError("no alertmanagers given (use --alertmanagers or --noload)")
            cases = [
                dataclasses.replace(c, targets=tuple(targets))
                for c in load_testcases(args.config)
            ]
    except (ConfigError, FileNotFoundError) as exc:
        log.error("%s", exc)
        return 1

    metrics = build_metrics()
    receiver = NotificationReceiver(metrics.notifications_received)
    server = ReceiverServer(create_app(receiver, metrics.registry), args.listen_host, args.listen_port)

    try:
        server.start()
        if args.noload:
            log.info("Load producing disabled. Press Ctrl+C to stop.")
            threading.Event().wait()
        else:
            Orchestrator(
                cases,
                receiver,
                metrics,
                results_dir=args.results_dir,
                drain_sec=drain_sec,
                delivery_timeout=timeout,
            ).run()
            log.info("All load tests ran. Exiting.")
    except KeyboardInterrupt:
        log.info("Interrupted, exiting.")
    except (HarnessError, OSError) as exc:
        log.error("Load test run failed: %s", exc)
        return 1
    finally:
        server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
