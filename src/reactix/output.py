"""Output bindings: push computed values to named display sinks.

A binding owns one output name. It wraps its source in a Calc (unless it is
one already), reads it whenever the Calc goes stale, and writes the result
to the session's sink under that name. Binding a name again replaces the
previous owner; the old binding is disposed and its Calc is dropped once
nothing else references it.

Evaluation errors stay scoped to their output: the sink gets error(name, e),
the session records the failure, and every other output keeps updating.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol

from reactix._errors import SilentException
from reactix._tracking import resolve_session
from reactix.calc import Calc
from reactix.effect import Observer

if TYPE_CHECKING:
    from reactix.session import Session


class Sink(Protocol):
    """Where output values end up (a widget tree, a test recorder...)."""

    def write(self, name: str, value: Any) -> None: ...

    def clear(self, name: str) -> None: ...

    def error(self, name: str, error: BaseException) -> None: ...


class MemorySink:
    """Sink that keeps the latest value or error per output, plus history."""

    def __init__(self) -> None:
        self.values: dict[str, Any] = {}
        self.errors: dict[str, BaseException] = {}
        self.history: list[tuple[str, str, Any]] = []

    def write(self, name: str, value: Any) -> None:
        self.values[name] = value
        self.errors.pop(name, None)
        self.history.append(("write", name, value))

    def clear(self, name: str) -> None:
        self.values.pop(name, None)
        self.errors.pop(name, None)
        self.history.append(("clear", name, None))

    def error(self, name: str, error: BaseException) -> None:
        self.values.pop(name, None)
        self.errors[name] = error
        self.history.append(("error", name, error))

    def writes(self, name: str) -> list[Any]:
        """Every value written to name, oldest first."""
        return [value for kind, key, value in self.history if kind == "write" and key == name]

    def __repr__(self) -> str:
        return f"MemorySink({self.values!r})"


class OutputBinding(Observer):
    """Keeps one named sink in sync with a Calc."""

    __slots__ = ("_name", "_source")

    def __init__(
        self,
        name: str,
        source: Calc | Callable[[], Any],
        *,
        session: Session | None = None,
    ) -> None:
        session = resolve_session(session)
        self._name = name
        self._source = source if isinstance(source, Calc) else Calc(source, session=session)
        session._claim_output(name, self)
        super().__init__(session)

    @property
    def name(self) -> str:
        return self._name

    @property
    def source(self) -> Calc:
        return self._source

    @property
    def kind(self) -> str:
        """Render kind of the wrapped function ("value" when not rendered)."""
        return getattr(self._source._fn, "kind", "value")

    def _execute(self) -> None:
        value = self._source.get()
        self._session.sink.write(self._name, value)

    def _failed(self, error: Exception) -> None:
        if isinstance(error, SilentException):
            self._session.sink.clear(self._name)
            return
        self._session.sink.error(self._name, error)
        self._session._report(f"output {self._name!r}", error)

    def dispose(self) -> None:
        if self._disposed:
            return
        super().dispose()
        self._session._release_output(self._name, self)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"OutputBinding({self._name!r}, {state})"


def output(name: str | Callable | None = None, *, session: Session | None = None):
    """Decorator: bind a function (or Calc) to an output name.

    The name defaults to the function's name:

        @output
        @render.text
        def greeting():
            return f"Hello {name.get()}"

        @output("plot_title")
        def title():
            ...

    Returns the OutputBinding.
    """
    if callable(name) or isinstance(name, Calc):
        return OutputBinding(_default_name(name), name, session=session)

    def decorator(fn: Calc | Callable[[], Any]) -> OutputBinding:
        return OutputBinding(name or _default_name(fn), fn, session=session)

    return decorator


def _default_name(source: Calc | Callable) -> str:
    fn = source._fn if isinstance(source, Calc) else source
    return fn.__name__
