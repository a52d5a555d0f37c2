"""Textual sink for reactix outputs. Opt-in: requires textual.

Each output name is a widget DOM id: output "summary" updates the widget
matching "#summary". Tables go into DataTable widgets; everything else goes
through the widget's update().

Only this module touches Textual: the engine never imports it. Writes are
dropped while the app is paused or not running, and writes from worker
threads hop to the app thread inside TextualSink, so callers just bind
outputs. _paused_apps holds the id of every app inside a pause() block.
"""

import logging
import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from reactix.render import Table

logger = logging.getLogger("reactix.textual")

# id(app) for every app currently paused.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Drop sink writes for app until the block exits (e.g. while remounting)."""
    app_id = id(app)
    _paused_apps.add(app_id)
    try:
        yield
    finally:
        _paused_apps.discard(app_id)


def is_safe(app) -> bool:
    """True when app is running and not paused, so its widgets can be queried."""
    return id(app) not in _paused_apps and app.is_running


class TextualSink:
    """Sink that writes outputs into a Textual app's widgets.

    Guards against writing during pause/not-running, ignores outputs whose
    widget is not mounted, and marshals writes from other threads via
    call_from_thread.
    """

    def __init__(self, app) -> None:
        self._app = app
        self._main = threading.get_ident()

    def write(self, name: str, value) -> None:
        self._push(name, value)

    def clear(self, name: str) -> None:
        self._push(name, "")

    def error(self, name: str, error: BaseException) -> None:
        self._push(name, f"Error: {error}")

    def _push(self, name: str, content) -> None:
        if not is_safe(self._app):
            logger.debug("skipped #%s: app not safe to query", name)
            return
        if threading.get_ident() != self._main:
            self._app.call_from_thread(self._update, name, content)
        else:
            self._update(name, content)

    def _update(self, name: str, content) -> None:
        try:
            widget = self._app.query_one(f"#{name}")
        except NoMatches:
            logger.debug("no widget #%s", name)
            return
        if hasattr(widget, "add_rows"):
            widget.clear(columns=True)
            if isinstance(content, Table):
                widget.add_columns(*content.columns)
                widget.add_rows(content.rows)
            return
        widget.update(content)
