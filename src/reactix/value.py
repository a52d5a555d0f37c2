"""Value cells: reactive inputs that track their readers.

When a Value is read inside a Calc, Effect or output evaluation, the read is
recorded as a dependency. Every set() bumps the version and notifies, even
when the new value equals the old one: a widget sending the same value twice
is still two events.

Thread safety: if the owning session has a thread scheduler (see
Session.set_scheduler), set() from another thread is marshaled to the
session's thread. Same-thread sets stay synchronous.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

from reactix._tracking import resolve_session, track

if TYPE_CHECKING:
    from reactix.session import Session

T = TypeVar("T")


class Value(Generic[T]):
    """A single reactive value with a version stamp."""

    __slots__ = ("_id", "_session", "_value", "_version")

    def __init__(self, value: T, *, session: Session | None = None) -> None:
        self._session = resolve_session(session)
        self._id = self._session._next_id()
        self._value = value
        self._version = 0

    @property
    def id(self) -> int:
        return self._id

    @property
    def version(self) -> int:
        return self._version

    def get(self) -> T:
        """Read the value. Inside an evaluation, registers the dependency."""
        track(self)
        return self._value

    def peek(self) -> T:
        """Read the value without registering a dependency."""
        return self._value

    def set(self, value: T) -> None:
        """Write a new value. Auto-marshals from background threads."""
        self._session._dispatch(lambda v=value: self._set_direct(v))

    def _set_direct(self, value: T) -> None:
        self._value = value
        self._version += 1
        self._session._changed(self._id)

    def __repr__(self) -> str:
        return f"Value({self._value!r})"
