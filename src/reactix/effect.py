"""Effects: side effects triggered by reactive state changes.

Unlike a Calc (lazy, evaluated on read), an observer runs eagerly. It is
scheduled when declared and again whenever anything it read changes; the
session runs scheduled observers in declaration order.

Observer is the shared machinery. Effect runs a plain function;
OutputBinding (reactix.output) and EventEffect (reactix.event) build on it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from reactix._errors import SilentException
from reactix._tracking import evaluating, resolve_session

if TYPE_CHECKING:
    from reactix.session import Session


class Observer:
    """An eager node: re-runs whenever its tracked dependencies change.

    Subclasses set their own attributes before calling Observer.__init__,
    which may run the observer immediately.
    """

    __slots__ = ("_id", "_session", "_deps", "_disposed", "__weakref__")

    def __init__(self, session: Session) -> None:
        self._session = session
        self._deps: dict = {}
        self._disposed = False
        self._id = session._register(self, observer=True)
        session._schedule(self)
        session._maybe_flush()

    @property
    def id(self) -> int:
        return self._id

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _execute(self) -> None:
        raise NotImplementedError

    def _failed(self, error: Exception) -> None:
        if isinstance(error, SilentException):
            return
        self._session._report(repr(self), error)

    def _run(self) -> None:
        """Re-run, re-tracking dependencies. Errors stop here."""
        if self._disposed:
            return
        with evaluating(self) as ctx:
            try:
                self._execute()
            except Exception as error:
                self._failed(error)
            finally:
                if not self._disposed:
                    self._deps = ctx.deps
                    self._session._graph.replace(self._id, ctx.deps)

    def _invalidate(self) -> None:
        self._session._schedule(self)

    def dispose(self) -> None:
        """Stop this observer. Disconnects from all dependencies."""
        if self._disposed:
            return
        self._disposed = True
        self._deps = {}
        self._session._forget_observer(self)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"{type(self).__name__}({state})"


class Effect(Observer):
    """Runs fn now, then again whenever anything fn read changes."""

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[], object], *, session: Session | None = None) -> None:
        self._fn = fn
        super().__init__(resolve_session(session))

    def _execute(self) -> None:
        self._fn()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Effect({getattr(self._fn, '__name__', '<fn>')}, {state})"


def effect(fn: Callable[[], object] | None = None, *, session: Session | None = None):
    """Run fn immediately, then re-run whenever any reactive value it reads changes.

    Returns the Effect (call .dispose() to stop).

    Usage:
        counter = session.value(0)
        log = []

        @effect
        def record():
            log.append(counter.get())
        # log == [0]: ran immediately

        counter.set(1)
        # log == [0, 1]

        record.dispose()
        counter.set(2)
        # log == [0, 1]: stopped

    Inside a batch the first run waits for the batch to end.
    """

    def decorator(fn: Callable[[], object]) -> Effect:
        return Effect(fn, session=session)

    if fn is None:
        return decorator
    return decorator(fn)
