"""Tests for Inputs."""

import pytest

from reactix import Inputs, Session


class TestInputs:
    def test_session_has_inputs(self):
        s = Session()
        assert isinstance(s.input, Inputs)
        assert len(s.input) == 0

    def test_declare_and_get(self):
        s = Session()
        s.input.declare("n", 10)
        s.input.declare("label", "hello")
        assert s.input.get("n") == 10
        assert s.input.get("label") == "hello"

    def test_get_unknown(self):
        s = Session()
        assert s.input.get("nope") is None
        assert s.input.get("nope", 5) == 5

    def test_getitem_returns_cell(self):
        s = Session()
        cell = s.input.declare("n", 1)
        assert s.input["n"] is cell
        with pytest.raises(KeyError):
            s.input["missing"]

    def test_set(self):
        s = Session()
        s.input.declare("x", 0)
        s.input.set("x", 42)
        assert s.input.get("x") == 42

    def test_set_unknown_declares(self):
        s = Session()
        s.input.set("fresh", 3)
        assert "fresh" in s.input
        assert s.input.get("fresh") == 3

    def test_redeclare_keeps_cell_and_sets_value(self):
        s = Session()
        first = s.input.declare("n", 1)
        log = []
        s.effect(lambda: log.append(s.input.get("n")))
        second = s.input.declare("n", 5)
        assert first is second
        assert log == [1, 5]

    def test_update_batches(self):
        s = Session()
        s.input.declare("x", 0)
        s.input.declare("y", 0)
        log = []
        s.effect(lambda: log.append((s.input.get("x"), s.input.get("y"))))
        assert log == [(0, 0)]
        s.input.update({"x": 1, "y": 2})
        assert log == [(0, 0), (1, 2)]  # single pass

    def test_reactive_tracking(self):
        s = Session()
        s.input.declare("count", 0)
        log = []
        s.effect(lambda: log.append(s.input.get("count")))
        s.input.set("count", 1)
        assert log == [0, 1]

    def test_names_and_iteration(self):
        s = Session()
        s.input.declare("a", 1)
        s.input.declare("b", 2)
        assert s.input.names() == ["a", "b"]
        assert list(s.input) == ["a", "b"]

    def test_repr(self):
        s = Session()
        s.input.declare("a", 1)
        assert repr(s.input) == "Inputs({'a': 1})"
