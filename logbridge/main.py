#!/usr/bin/env python3
"""Main program entry point."""

import argparse
import logging
import signal
import threading

from logbridge.config import BridgeConfig, CustomInterval, resolve_interval
from logbridge.core.client import LogClient
from logbridge.core.rules import AnySubsystem
from logbridge.data.sources.base import TimePeriod
from logbridge.drivers.file_driver import JsonlFileDriver
from logbridge.drivers.logging_driver import LoggingDriver
from logbridge.exceptions import InvalidIntervalError

logger = logging.getLogger("logbridge")


def build_parser():
    parser = argparse.ArgumentParser(prog="logbridge", description="Forward new journal entries to drivers.")
    parser.add_argument("--interval", type=float, default=30.0, help="polling interval in seconds (min 1)")
    parser.add_argument("--since", choices=[p.value for p in TimePeriod if p != TimePeriod.CUSTOM],
                        default=TimePeriod.NOW.value, help="where to start when no cursor is saved")
    parser.add_argument("--subsystem", action="append", default=[],
                        help="only forward entries from this subsystem (repeatable)")
    parser.add_argument("--output", help="append entries to this JSONL file instead of logging them")
    parser.add_argument("--cursor-file", help="where to keep the read position between runs")
    parser.add_argument("--log-level", default="INFO")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        resolve_interval(args.interval)
    except InvalidIntervalError as e:
        parser.error(str(e))
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = BridgeConfig(
        interval=CustomInterval(args.interval),
        time_period=TimePeriod(args.since),
        cursor_file=args.cursor_file,
    )
    rules = [AnySubsystem(name) for name in args.subsystem]
    driver = JsonlFileDriver("jsonl", args.output) if args.output else LoggingDriver("log")

    done = threading.Event()
    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, lambda *_: done.set())

    with LogClient.from_config(config) as client:
        client.register_driver(driver, rules)
        client.start()
        logger.info("Forwarding entries to %s, press Ctrl+C to stop", driver.id)
        done.wait()

    if isinstance(driver, JsonlFileDriver):
        driver.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
