import pytest

from logbridge.core.cursor import CursorStore, CursorTracker
from logbridge.core.log_watcher import PollingState
from logbridge.data.sources.base import Position
from logbridge.exceptions import InvalidStateError, OutOfOrderError


def test_starts_empty():
    assert CursorTracker().current() is None


def test_advance_forward_and_equal():
    cursor = CursorTracker()
    cursor.advance(Position(10, 1))
    cursor.advance(Position(10, 1))
    cursor.advance(Position(10, 2))
    assert cursor.current() == Position(10, 2)


def test_advance_backwards_rejected():
    cursor = CursorTracker(Position(10, 5))
    with pytest.raises(OutOfOrderError) as excinfo:
        cursor.advance(Position(10, 4))
    assert excinfo.value.current == Position(10, 5)
    assert cursor.current() == Position(10, 5)


def test_token_does_not_affect_ordering():
    assert Position(5, 1, token="a") == Position(5, 1, token="b")
    assert Position(5, 1, token="z") < Position(5, 2, token="a")


def test_reset_without_guard():
    cursor = CursorTracker(Position(1, 1))
    cursor.reset()
    assert cursor.current() is None


def test_reset_guard_blocks():
    def guard(operation):
        raise InvalidStateError(PollingState.RUNNING, operation)

    cursor = CursorTracker(Position(1, 1), reset_guard=guard)
    with pytest.raises(InvalidStateError):
        cursor.reset()
    with pytest.raises(InvalidStateError):
        cursor.restore(None)
    assert cursor.current() == Position(1, 1)


def test_store_round_trip(tmp_path):
    store = CursorStore(tmp_path / "nested" / "cursor.json")
    assert store.load() is None
    store.save(Position(123, 7, token="s=abc;i=7"))
    loaded = store.load()
    assert loaded == Position(123, 7)
    assert loaded.token == "s=abc;i=7"


def test_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "cursor.json"
    path.write_text("not json")
    assert CursorStore(path).load() is None


def test_store_skips_empty_position(tmp_path):
    path = tmp_path / "cursor.json"
    CursorStore(path).save(None)
    assert not path.exists()


def test_same_epoch_orders_by_sequence_not_time():
    before_step = Position(2_000, 2, epoch="s1")
    after_step = Position(1_000, 3, epoch="s1")
    assert before_step < after_step
    cursor = CursorTracker(before_step)
    cursor.advance(after_step)
    assert cursor.current() == after_step


def test_different_epochs_order_by_time():
    assert Position(1_000, 900, epoch="old") < Position(2_000, 1, epoch="new")


def test_store_keeps_epoch(tmp_path):
    store = CursorStore(tmp_path / "cursor.json")
    store.save(Position(5, 6, token="t", epoch="s1"))
    assert store.load().epoch == "s1"
