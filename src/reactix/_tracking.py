"""Dependency tracking: the heart of reactix.

Every Calc, Effect and output binding evaluates its function inside a fresh
EvaluationContext. The context is published through a contextvar; any
Value.get() or Calc.get() made while it is active records itself (id and
version) in the context's dependency buffer. After the evaluation the buffer
becomes the node's lastDeps and the session rebuilds the node's graph edges.

isolate() flips the context's isolation flag so reads inside it are not
recorded.
"""

from __future__ import annotations

import contextvars
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterator, TypeVar, overload

from reactix._errors import CrossSessionError, NoSessionError

if TYPE_CHECKING:
    from reactix.calc import Calc
    from reactix.session import Session
    from reactix.value import Value

    Producer = Value | Calc

T = TypeVar("T")


@dataclass(eq=False)
class EvaluationContext:
    """Dependency-collection buffer for one evaluation of one node."""

    node: Any
    deps: dict[int, Producer] = field(default_factory=dict)
    versions: dict[int, int | None] = field(default_factory=dict)
    isolated: bool = False

    def record(self, producer: Producer) -> None:
        if self.isolated:
            return
        if producer._session is not self.node._session:
            raise CrossSessionError(
                f"{producer!r} belongs to another session than {self.node!r}"
            )
        self.deps[producer._id] = producer
        self.versions[producer._id] = producer._version


# The evaluation currently collecting dependencies, if any.
current_context: contextvars.ContextVar[EvaluationContext | None] = contextvars.ContextVar(
    "current_context", default=None
)


def track(producer: Producer) -> None:
    """Register producer with the active evaluation, if there is one."""
    ctx = current_context.get()
    if ctx is not None:
        ctx.record(producer)


@contextmanager
def evaluating(node) -> Iterator[EvaluationContext]:
    """Run a block as node's evaluation. Yields the fresh context."""
    ctx = EvaluationContext(node)
    token = current_context.set(ctx)
    try:
        yield ctx
    finally:
        current_context.reset(token)


@contextmanager
def _isolated() -> Iterator[None]:
    ctx = current_context.get()
    if ctx is None:
        yield
        return
    previous = ctx.isolated
    ctx.isolated = True
    try:
        yield
    finally:
        ctx.isolated = previous


@overload
def isolate() -> AbstractContextManager[None]: ...
@overload
def isolate(fn: Callable[[], T]) -> T: ...
def isolate(fn=None):
    """Read reactive values without depending on them.

    Usage:
        total = isolate(lambda: price.get() * qty.get())

        with isolate():
            seen = counter.get()
    """
    if fn is None:
        return _isolated()
    with _isolated():
        return fn()


# The session constructors fall back to when none is passed explicitly.
_current_session: contextvars.ContextVar[Session | None] = contextvars.ContextVar(
    "current_session", default=None
)


def current_session() -> Session:
    """The session made current by `with session:`."""
    session = _current_session.get()
    if session is None:
        raise NoSessionError(
            "No current session. Pass session= or enter one with `with Session():`"
        )
    return session


def resolve_session(session: Session | None = None) -> Session:
    return session if session is not None else current_session()
