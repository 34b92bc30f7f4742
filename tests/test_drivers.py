import json
import logging
from datetime import datetime, timezone

from logbridge.data.sources.base import LogLevel
from logbridge.drivers.base import LogDriver
from logbridge.drivers.callback_driver import CallbackDriver
from logbridge.drivers.file_driver import JsonlFileDriver
from logbridge.drivers.logging_driver import LoggingDriver
from logbridge.drivers.memory_driver import MemoryDriver

DATE = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_drivers_satisfy_protocol(tmp_path):
    file_driver = JsonlFileDriver("f", tmp_path / "out.jsonl")
    try:
        for driver in (CallbackDriver("c", print), MemoryDriver("m"), LoggingDriver("l"), file_driver):
            assert isinstance(driver, LogDriver)
    finally:
        file_driver.close()


def test_callback_driver():
    calls = []
    driver = CallbackDriver("c", lambda *args: calls.append(args))
    driver.receive(LogLevel.INFO, "ui", DATE, "hello")
    assert calls == [(LogLevel.INFO, "ui", DATE, "hello")]


def test_memory_driver_wait_for():
    driver = MemoryDriver("m")
    assert not driver.wait_for(1, timeout=0.01)
    driver.receive(LogLevel.DEBUG, "", DATE, "x")
    assert driver.wait_for(1, timeout=0.01)
    driver.clear()
    assert driver.entries == []


def test_logging_driver_maps_levels(caplog):
    driver = LoggingDriver("l", logging.getLogger("test.entries"))
    with caplog.at_level(logging.DEBUG, logger="test.entries"):
        driver.receive(LogLevel.FAULT, "db", DATE, "disk gone")
        driver.receive(LogLevel.NOTICE, "", DATE, "heads up")
    assert [r.levelno for r in caplog.records] == [logging.CRITICAL, logging.WARNING]
    assert "[db] disk gone" in caplog.records[0].getMessage()
    assert "[-] heads up" in caplog.records[1].getMessage()


def test_jsonl_file_driver(tmp_path):
    path = tmp_path / "logs" / "out.jsonl"
    driver = JsonlFileDriver("f", path)
    driver.receive(LogLevel.ERROR, "api", DATE, "boom")
    driver.receive(LogLevel.INFO, "", DATE, "ok")
    driver.close()
    driver.close()

    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert lines[0] == {"date": DATE.isoformat(), "level": "error", "category": "api", "message": "boom"}
    assert lines[1]["message"] == "ok"
