"""Tests for observe_event and event_reactive."""

import pytest

from reactix import EventCalc, EventEffect, Session, SilentException


class TestObserveEvent:
    def test_idle_until_trigger(self):
        s = Session()
        trigger = s.value(0)
        log = []
        s.observe_event(trigger, lambda: log.append("ran"))
        assert log == []

    def test_isolated_reads_do_not_trigger(self):
        s = Session()
        trigger = s.value(0)
        x = s.value(0)
        seen = []
        s.observe_event(trigger, lambda: seen.append(x.get()))
        x.set(100)
        assert seen == []
        trigger.set(1)
        assert seen == [100]  # value at evaluation time, not registration
        x.set(5)
        assert seen == [100]

    def test_once_per_trigger_set(self):
        s = Session()
        trigger = s.value(0)
        log = []
        s.observe_event(trigger, lambda: log.append(trigger.peek()))
        trigger.set(1)
        trigger.set(1)  # same value is still a click
        trigger.set(2)
        assert log == [1, 1, 2]

    def test_decorator_form(self):
        s = Session()
        trigger = s.value(0)
        log = []

        @s.observe_event(trigger)
        def handler():
            log.append("clicked")
            return "ignored"

        assert isinstance(handler, EventEffect)
        trigger.set(1)
        assert log == ["clicked"]

    def test_dispose(self):
        s = Session()
        trigger = s.value(0)
        log = []
        gate = s.observe_event(trigger, lambda: log.append(1))
        gate.dispose()
        trigger.set(1)
        assert log == []

    def test_multiple_triggers(self):
        s = Session()
        save = s.value(0)
        submit = s.value(0)
        log = []
        s.observe_event(save, submit, lambda: log.append("ran"))
        save.set(1)
        submit.set(1)
        assert log == ["ran", "ran"]

    def test_trigger_set_in_same_batch_as_declaration(self):
        s = Session()
        trigger = s.value(0)
        log = []
        with s.batch():
            s.observe_event(trigger, lambda: log.append("ran"))
            trigger.set(1)
        assert log == ["ran"]

    def test_ignore_none(self):
        s = Session()
        trigger = s.value(0)
        log = []
        s.observe_event(trigger, lambda: log.append(trigger.peek()), ignore_none=True)
        trigger.set(None)
        assert log == []
        trigger.set(3)
        assert log == [3]

    def test_calc_trigger_sets_baseline(self):
        s = Session()
        source = s.value(1)
        trigger = s.calc(lambda: source.get())
        log = []
        s.observe_event(trigger, lambda: log.append(trigger.get()))
        assert log == []
        source.set(2)
        assert log == [2]

    def test_requires_a_trigger(self):
        s = Session()
        with pytest.raises(TypeError):
            s.observe_event(lambda: None)


class TestEventReactive:
    def test_strictly_lazy(self):
        s = Session()
        trigger = s.value(0)
        x = s.value(1)
        calls = []

        def body():
            calls.append(x.get())
            return x.get() * 10

        result = s.event_reactive(trigger, body)
        assert isinstance(result, EventCalc)
        trigger.set(1)
        assert calls == []  # nothing read it yet
        assert result.get() == 10
        assert result.get() == 10
        assert calls == [1]

    def test_reads_before_trigger_are_silent(self):
        s = Session()
        trigger = s.value(0)
        result = s.event_reactive(trigger, lambda: "value")
        with pytest.raises(SilentException):
            result.get()

    def test_non_trigger_changes_do_not_invalidate(self):
        s = Session()
        trigger = s.value(0)
        x = s.value(1)
        result = s.event_reactive(trigger, lambda: x.get())
        trigger.set(1)
        assert result.get() == 1
        x.set(2)
        assert not result.stale
        assert result.get() == 1
        trigger.set(2)
        assert result.stale
        assert result.get() == 2

    def test_failed_body_never_returns_previous_value(self):
        s = Session()
        trigger = s.value(0)
        x = s.value(1)
        result = s.event_reactive(trigger, lambda: 10 // x.get())
        trigger.set(1)
        assert result.get() == 10

        x.set(0)
        trigger.set(2)
        with pytest.raises(ZeroDivisionError):
            result.get()
        with pytest.raises(ZeroDivisionError):
            result.get()
        assert result.stale

        x.set(5)  # not a trigger: the failure stands
        with pytest.raises(ZeroDivisionError):
            result.get()
        result.invalidate()
        assert result.get() == 2
        assert not result.stale

    def test_next_trigger_retries_failed_body(self):
        s = Session()
        trigger = s.value(0)
        x = s.value(0)
        calls = []

        def body():
            calls.append(x.get())
            return 10 // x.get()

        result = s.event_reactive(trigger, body)
        trigger.set(1)
        with pytest.raises(ZeroDivisionError):
            result.get()
        x.set(2)
        trigger.set(2)
        assert result.get() == 5
        assert result.get() == 5
        assert calls == [0, 2]

    def test_decorator_form(self):
        s = Session()
        trigger = s.value(0)
        n = s.value(3)

        @s.event_reactive(trigger)
        def sample():
            return list(range(n.get()))

        trigger.set(1)
        assert sample.get() == [0, 1, 2]

    def test_bound_output_waits_for_trigger(self):
        s = Session()
        trigger = s.value(0)
        n = s.value(4)
        result = s.event_reactive(trigger, lambda: n.get() ** 2)
        s.bind("square", result)
        assert "square" not in s.sink.values
        assert s.sink.history == [("clear", "square", None)]
        n.set(5)
        assert "square" not in s.sink.values
        trigger.set(1)
        assert s.sink.values["square"] == 25
        n.set(6)
        assert s.sink.values["square"] == 25
        assert s.errors == []
