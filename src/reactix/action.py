"""Actions and transactions: batched state mutations.

Wrapping mutations in an @action or `with transaction()` defers the
session's scheduler pass until the outermost scope exits. Observers then
run once and see every change together, never an intermediate state where
some inputs have moved and others haven't yet.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, ParamSpec, TypeVar

from reactix._tracking import resolve_session

if TYPE_CHECKING:
    from reactix.session import Session

P = ParamSpec("P")
R = TypeVar("R")


def action(fn: Callable[P, R] | None = None, *, session: Session | None = None):
    """Decorator: batch all Value mutations inside fn.

    Observers only run after fn returns, not during.

    Usage:
        a = session.value(0)
        b = session.value(0)

        @action(session=session)
        def swap():
            x, y = a.get(), b.get()
            a.set(y)
            b.set(x)

    Without session=, the session current at call time is used.
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with resolve_session(session).batch():
                return fn(*args, **kwargs)

        return wrapper

    if fn is None:
        return decorator
    return decorator(fn)


@contextmanager
def transaction(session: Session | None = None):
    """Context manager for batching mutations.

    Usage:
        with transaction(session):
            a.set(1)
            b.set(2)
            # observers run here, after both are set
    """
    with resolve_session(session).batch():
        yield
