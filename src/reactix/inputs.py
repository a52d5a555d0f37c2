"""Inputs: widget input ids mapped to Value cells.

Each input widget declares a unique id; its current value lives in a Value
so reads inside Calcs, effects and outputs are tracked. Re-declaring an id
keeps the cell and sets the new value (last declaration wins).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, Mapping

from reactix.value import Value

if TYPE_CHECKING:
    from reactix.session import Session


class Inputs:
    """Key-based Value container owned by one session."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._values: dict[str, Value] = {}

    def declare(self, name: str, default: Any = None) -> Value:
        value = self._values.get(name)
        if value is None:
            value = self._values[name] = Value(default, session=self._session)
        else:
            value.set(default)
        return value

    def __getitem__(self, name: str) -> Value:
        return self._values[name]

    def get(self, name: str, default: Any = None) -> Any:
        """Tracked read. Unknown ids return default and are not tracked."""
        value = self._values.get(name)
        return value.get() if value is not None else default

    def set(self, name: str, value: Any) -> None:
        """Deliver a widget change. Unknown ids are declared on the fly."""
        cell = self._values.get(name)
        if cell is None:
            self.declare(name, value)
        else:
            cell.set(value)

    def update(self, values: Mapping[str, Any]) -> None:
        """Apply several widget changes as one event."""
        with self._session.batch():
            for name, value in values.items():
                self.set(name, value)

    def names(self) -> list[str]:
        return list(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        snapshot = {name: value.peek() for name, value in self._values.items()}
        return f"Inputs({snapshot!r})"
