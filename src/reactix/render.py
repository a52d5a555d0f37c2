"""Render wrappers: shape a function's result for an output widget kind.

Each wrapper returns a plain function carrying a ``kind`` attribute. Output
bindings wrap it in a Calc like any other function, so wrappers compose
with @output in either session style:

    @session.output("summary")
    @render.text
    def summary():
        return f"{n.get()} draws"
"""

from __future__ import annotations

import functools
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True, slots=True)
class Table:
    """Column names plus rows, each row a tuple in column order."""

    columns: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...]

    def __len__(self) -> int:
        return len(self.rows)


def to_table(data: Any) -> Table:
    """Normalize tabular data.

    Accepts a Table, a mapping of column -> values (short columns padded
    with None), a sequence of mappings
    (columns in first-seen order, missing cells None) or a sequence of
    sequences (columns named by position, short rows padded with None).
    """
    if isinstance(data, Table):
        return data
    if isinstance(data, Mapping):
        columns = tuple(str(key) for key in data)
        cells = [list(values) for values in data.values()]
        height = max((len(values) for values in cells), default=0)
        return Table(
            columns,
            tuple(
                tuple(values[i] if i < len(values) else None for values in cells)
                for i in range(height)
            ),
        )

    rows = list(data)
    if not rows:
        return Table((), ())
    if isinstance(rows[0], Mapping):
        columns: list = []
        for row in rows:
            for key in row:
                if key not in columns:
                    columns.append(key)
        return Table(
            tuple(str(c) for c in columns),
            tuple(tuple(row.get(c) for c in columns) for row in rows),
        )

    width = max(len(row) for row in rows)
    return Table(
        tuple(str(i) for i in range(width)),
        tuple(tuple(row) + (None,) * (width - len(row)) for row in rows),
    )


def _code(value: Any) -> str:
    return "\n".join(line.rstrip() for line in str(value).rstrip().splitlines())


def _wrap(kind: str, transform: Callable[[Any], Any], fn: Callable[[], Any]) -> Callable[[], Any]:
    @functools.wraps(fn)
    def wrapper():
        return transform(fn())

    wrapper.kind = kind
    return wrapper


def text(fn: Callable[[], Any]) -> Callable[[], str]:
    """Render the result as a string."""
    return _wrap("text", str, fn)


def code(fn: Callable[[], Any]) -> Callable[[], str]:
    """Render the result as preformatted text, trailing whitespace trimmed."""
    return _wrap("code", _code, fn)


def table(fn: Callable[[], Any]) -> Callable[[], Table]:
    """Render the result as a Table (see to_table)."""
    return _wrap("table", to_table, fn)
