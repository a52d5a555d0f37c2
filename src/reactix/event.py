"""Event gates: computations that only run when a trigger advances.

observe_event(trigger, fn) runs fn for its side effects each time trigger
is set. event_reactive(trigger, fn) returns a Calc whose value is
recomputed, lazily, on the first read after trigger is set. In both, fn runs
under isolate(): the trigger is the only dependency, so reading other
values inside fn never re-runs it.

    button = session.input.declare("go", 0)
    n = session.input.declare("n", 10)

    @observe_event(button)
    def _():
        print("n is", n.get())   # n changes alone do nothing

Triggers may be Values or Calcs. Gates start idle: declaring one never runs
fn. A Calc trigger's first evaluation sets the baseline instead of firing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Sequence, TypeVar

from reactix._errors import SilentException
from reactix._tracking import isolate, resolve_session
from reactix.calc import _UNSET, Calc
from reactix.effect import Observer

if TYPE_CHECKING:
    from reactix.session import Session
    from reactix.value import Value

T = TypeVar("T")


class _Gate:
    """Per-trigger record of the last version seen."""

    __slots__ = ("triggers", "seen", "ignore_none")

    def __init__(self, triggers: Sequence[Value | Calc], ignore_none: bool) -> None:
        if not triggers:
            raise TypeError("an event gate needs at least one trigger")
        self.triggers = tuple(triggers)
        self.seen: list[int | None] = [t._version for t in self.triggers]
        self.ignore_none = ignore_none

    def advanced(self) -> bool:
        """Read every trigger (tracked) and report whether any moved on."""
        fired = []
        for index, trigger in enumerate(self.triggers):
            value = trigger.get()
            version = trigger._version
            if self.seen[index] is not None and version != self.seen[index]:
                fired.append(value)
            self.seen[index] = version
        if not fired:
            return False
        if self.ignore_none and all(value is None for value in fired):
            return False
        return True


class EventEffect(Observer):
    """observe_event() implementation."""

    __slots__ = ("_fn", "_gate")

    def __init__(
        self,
        triggers: Sequence[Value | Calc],
        fn: Callable[[], object],
        *,
        ignore_none: bool = False,
        session: Session | None = None,
    ) -> None:
        self._fn = fn
        self._gate = _Gate(triggers, ignore_none)
        super().__init__(resolve_session(session))

    def _execute(self) -> None:
        if self._gate.advanced():
            isolate(self._fn)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"EventEffect({getattr(self._fn, '__name__', '<fn>')}, {state})"


class EventCalc(Calc[T]):
    """event_reactive() implementation. Strictly lazy, like any Calc."""

    __slots__ = ("_gate", "_pending")

    def __init__(
        self,
        triggers: Sequence[Value | Calc],
        fn: Callable[[], T],
        *,
        ignore_none: bool = False,
        session: Session | None = None,
    ) -> None:
        self._gate = _Gate(triggers, ignore_none)
        self._pending = False
        super().__init__(fn, session=session)

    def _evaluate(self) -> T:
        # A trigger stays owed until the body has succeeded for it.
        if self._gate.advanced():
            self._pending = True
        if self._pending:
            value = isolate(self._fn)
            self._pending = False
            return value
        if self._value is _UNSET:
            # Idle: nothing to show until the first trigger.
            raise SilentException()
        return self._value


def _split(args: tuple) -> tuple[tuple, Callable | None]:
    if args and callable(args[-1]):
        return args[:-1], args[-1]
    return args, None


def observe_event(*args, ignore_none: bool = False, session: Session | None = None):
    """Run a side effect each time one of the triggers is set.

    Both forms work:
        observe_event(button, handler)

        @observe_event(button)
        def handler(): ...

    Returns the EventEffect (call .dispose() to stop). The handler's return
    value is discarded.
    """
    triggers, fn = _split(args)

    def decorator(fn: Callable[[], object]) -> EventEffect:
        return EventEffect(triggers, fn, ignore_none=ignore_none, session=session)

    if fn is None:
        return decorator
    return decorator(fn)


def event_reactive(*args, ignore_none: bool = False, session: Session | None = None):
    """A Calc recomputed only when one of the triggers is set.

    The body runs on the first read after a trigger, never on the trigger
    alone. Reading before any trigger raises SilentException, so an output
    bound to it stays empty.

    Usage:
        @event_reactive(button)
        def sample():
            return draw(n.get())
    """
    triggers, fn = _split(args)

    def decorator(fn: Callable[[], T]) -> EventCalc[T]:
        return EventCalc(triggers, fn, ignore_none=ignore_none, session=session)

    if fn is None:
        return decorator
    return decorator(fn)
