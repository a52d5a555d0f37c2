"""Tests for Value cells."""

import threading

import pytest

from reactix import NoSessionError, Session, Value


class TestValue:
    def test_get_set(self):
        s = Session()
        v = s.value(42)
        assert v.get() == 42
        v.set(100)
        assert v.get() == 100

    def test_version_bumps_on_every_set(self):
        s = Session()
        v = s.value(1)
        assert v.version == 0
        v.set(1)
        assert v.version == 1
        v.set(2)
        assert v.version == 2

    def test_equal_value_still_notifies(self):
        """Setting the same value is still an event."""
        s = Session()
        v = s.value(42)
        log = []
        s.effect(lambda: log.append(v.get()))
        assert log == [42]
        v.set(42)
        assert log == [42, 42]

    def test_peek_does_not_track(self):
        s = Session()
        v = s.value(1)
        log = []
        s.effect(lambda: log.append(v.peek()))
        v.set(2)
        assert log == [1]

    def test_ids_unique_within_session(self):
        s = Session()
        assert s.value(0).id != s.value(0).id

    def test_requires_session(self):
        with pytest.raises(NoSessionError):
            Value(1)

    def test_uses_current_session(self):
        with Session() as s:
            v = Value(1)
        assert v._session is s

    def test_repr(self):
        s = Session()
        assert "Value(5)" in repr(s.value(5))


class TestAutoMarshal:
    """Value.set() auto-marshals from background threads."""

    def test_same_thread_is_synchronous(self):
        calls = []
        s = Session(scheduler=lambda f: (calls.append(f), f()))
        v = s.value(0)
        v.set(42)
        assert v.get() == 42
        assert calls == []

    def test_background_thread_marshals(self):
        calls = []
        s = Session(scheduler=lambda f: (calls.append(f), f()))
        v = s.value(0)
        done = threading.Event()

        def bg():
            v.set(99)
            done.set()

        threading.Thread(target=bg).start()
        assert done.wait(timeout=2)
        assert len(calls) == 1
        assert v.get() == 99

    def test_no_scheduler_is_direct(self):
        s = Session()
        v = s.value(0)
        done = threading.Event()

        def bg():
            v.set(7)
            done.set()

        threading.Thread(target=bg).start()
        assert done.wait(timeout=2)
        assert v.get() == 7
