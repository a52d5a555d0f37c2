"""Calc: memoized derived values with automatic dependency tracking.

A Calc wraps a function. Reading it evaluates the function in a fresh
EvaluationContext, records what the function read, and caches the result.
When any dependency changes the scheduler marks the Calc stale; the next
read re-evaluates. Any number of upstream changes between two reads cost a
single recomputation.

Calcs are lazy: nothing runs until something reads them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from reactix._errors import CycleError
from reactix._tracking import EvaluationContext, evaluating, resolve_session, track

if TYPE_CHECKING:
    from reactix.session import Session

T = TypeVar("T")

_UNSET = object()


class Calc(Generic[T]):
    """A derived value that auto-tracks dependencies and caches the result."""

    __slots__ = (
        "_id",
        "_session",
        "_fn",
        "_value",
        "_version",
        "_deps",
        "_versions",
        "_stale",
        "_failed",
        "_evaluating",
        "_error",
        "__weakref__",
    )

    def __init__(self, fn: Callable[[], T], *, session: Session | None = None) -> None:
        self._session = resolve_session(session)
        self._fn = fn
        self._value = _UNSET
        self._version: int | None = None
        self._deps: dict = {}
        self._versions: dict[int, int | None] = {}
        self._stale = True
        self._failed = False
        self._evaluating = False
        self._error: Exception | None = None
        self._id = self._session._register(self)

    @property
    def id(self) -> int:
        return self._id

    @property
    def version(self) -> int | None:
        """Bumped on every successful evaluation; None until the first one."""
        return self._version

    @property
    def stale(self) -> bool:
        return self._stale

    def get(self) -> T:
        """Read the value. Recomputes if stale."""
        if self._evaluating:
            raise CycleError(f"{self!r} read itself while evaluating")
        try:
            if self._failed:
                # Failed evaluations are memoized until something invalidates us.
                raise self._error
            if not self._is_current():
                self._recompute()
        finally:
            # Tracked even on failure, so the reader re-runs once this is fixed.
            track(self)
        return self._value

    def _is_current(self) -> bool:
        if self._stale or self._value is _UNSET:
            return False
        return all(
            self._deps[dep_id]._version == version
            for dep_id, version in self._versions.items()
        )

    def _evaluate(self) -> T:
        return self._fn()

    def _recompute(self) -> None:
        """Re-evaluate the function, tracking dependencies."""
        self._evaluating = True
        try:
            with evaluating(self) as ctx:
                try:
                    value = self._evaluate()
                finally:
                    self._set_dependencies(ctx)
        except Exception as error:
            self._stale = True
            self._failed = True
            self._error = error
            raise
        finally:
            self._evaluating = False

        self._value = value
        self._stale = False
        self._failed = False
        self._error = None
        self._version = (self._version or 0) + 1

    def _set_dependencies(self, ctx: EvaluationContext) -> None:
        self._deps = ctx.deps
        self._versions = ctx.versions
        self._session._graph.replace(self._id, ctx.deps)

    def _invalidate(self) -> None:
        """Called by the scheduler when a dependency changed.

        Marks stale and propagates to our own dependents. A Calc that is
        already stale has already propagated, unless its last evaluation
        failed.
        """
        if self._stale and not self._failed:
            return
        self._stale = True
        self._failed = False
        self._error = None
        self._session._invalidate_from(self._id)

    def invalidate(self) -> None:
        """Force a recomputation on the next read."""
        self._invalidate()
        self._session._maybe_flush()

    def dispose(self) -> None:
        """Disconnect from all dependencies and drop the cached value."""
        self._deps = {}
        self._versions = {}
        self._session._graph.replace(self._id, ())
        self._value = _UNSET
        self._stale = True
        self._failed = False
        self._error = None

    def __repr__(self) -> str:
        name = getattr(self._fn, "__name__", "<fn>")
        state = "stale" if self._stale else f"cached={self._value!r}"
        return f"{type(self).__name__}({name}, {state})"


def calc(fn: Callable[[], T] | None = None, *, session: Session | None = None):
    """Decorator/factory to create a Calc from a function.

    Usage:
        n = session.value(5)

        @calc
        def doubled():
            return n.get() * 2

        doubled.get()  # 10
        n.set(7)
        doubled.get()  # 14

    Uses the current session unless session= is given.
    """

    def decorator(fn: Callable[[], T]) -> Calc[T]:
        return Calc(fn, session=session)

    if fn is None:
        return decorator
    return decorator(fn)
