from logbridge.core.dispatcher import Dispatcher
from logbridge.core.registry import DriverRegistry
from logbridge.core.rules import AnySubsystem, SubsystemAndCategories
from logbridge.data.sources.base import LogLevel
from logbridge.drivers.memory_driver import MemoryDriver
from logbridge.exceptions import DriverDeliveryError

from conftest import FailingDriver, make_entry


def test_delivers_normalized_fields():
    registry = DriverRegistry()
    driver = MemoryDriver("all")
    registry.register("all", driver)
    entry = make_entry(1, category="ui", message="hello", level=LogLevel.FAULT)

    assert Dispatcher().dispatch(entry, registry.snapshot()) == 1
    (received,) = driver.entries
    assert received.level == LogLevel.FAULT
    assert received.category == "ui"
    assert received.date == entry.date
    assert received.message == "hello"


def test_rule_filtering():
    registry = DriverRegistry()
    any_app = MemoryDriver("any")
    ui_only = MemoryDriver("ui")
    other = MemoryDriver("other")
    registry.register("any", any_app, [AnySubsystem("com.app")])
    registry.register("ui", ui_only, [SubsystemAndCategories("com.app", {"ui"})])
    registry.register("other", other, [AnySubsystem("com.other")])

    dispatcher = Dispatcher()
    snapshot = registry.snapshot()
    dispatcher.dispatch(make_entry(1, category="ui"), snapshot)
    dispatcher.dispatch(make_entry(2, category="api"), snapshot)

    assert any_app.messages == ["entry 1", "entry 2"]
    assert ui_only.messages == ["entry 1"]
    assert other.messages == []


def test_disabled_driver_skipped():
    registry = DriverRegistry()
    driver = MemoryDriver("x")
    registry.register("x", driver)
    registry.set_enabled("x", False)
    assert Dispatcher().dispatch(make_entry(1), registry.snapshot()) == 0
    assert driver.entries == []


def test_failing_driver_is_isolated():
    errors = []
    registry = DriverRegistry()
    broken = FailingDriver()
    healthy = MemoryDriver("healthy")
    registry.register("broken", broken)
    registry.register("healthy", healthy)

    entry = make_entry(1)
    delivered = Dispatcher(on_error=errors.append).dispatch(entry, registry.snapshot())

    assert delivered == 1
    assert healthy.messages == ["entry 1"]
    (error,) = errors
    assert isinstance(error, DriverDeliveryError)
    assert error.driver_id == "broken"
    assert error.entry is entry
    assert isinstance(error.__cause__, RuntimeError)


def test_failing_error_hook_does_not_break_dispatch():
    def bad_hook(error):
        raise ValueError("hook broken")

    registry = DriverRegistry()
    healthy = MemoryDriver("healthy")
    registry.register("broken", FailingDriver())
    registry.register("healthy", healthy)
    Dispatcher(on_error=bad_hook).dispatch(make_entry(1), registry.snapshot())
    assert healthy.messages == ["entry 1"]
