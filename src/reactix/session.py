"""Session: one isolated reactive graph per connected user.

A session owns its Values, Calcs, observers, output bindings and
dependency graph; nothing is shared between sessions. It is also the
invalidation scheduler:

- Value.set() walks the graph from the changed cell. Dependent Calcs are
  marked stale (once) and propagate further; dependent observers are queued.
- flush() runs queued observers in declaration order, in passes, until no
  observer is queued. An observer runs at most once per pass, and a Calc
  read by several observers recomputes once.
- Outside a batch every set() flushes right away. batch() (and
  reactix.action) defers the flush to the outermost exit. A set made by an
  observer during a flush is picked up by that same flush.

Evaluation errors are caught at the observer boundary, logged, recorded in
Session.errors and handed to on_error callbacks. They never abort the pass.
"""

from __future__ import annotations

import itertools
import logging
import threading
import weakref
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from reactix._errors import FlushLimitError, SessionClosedError
from reactix._graph import DependencyGraph
from reactix._tracking import _current_session, isolate
from reactix.calc import Calc
from reactix.config import SessionConfig
from reactix.effect import Effect, Observer
from reactix.event import event_reactive, observe_event
from reactix.inputs import Inputs
from reactix.output import MemorySink, OutputBinding, Sink, output
from reactix.value import Value

logger = logging.getLogger("reactix.session")


@dataclass(frozen=True, slots=True)
class EvaluationFailure:
    """An error caught at an observer boundary."""

    source: str
    error: Exception


class Session:
    """Owns one reactive graph and schedules its re-evaluation."""

    def __init__(
        self,
        config: SessionConfig | None = None,
        *,
        sink: Sink | None = None,
        scheduler: Callable[[Callable[[], None]], Any] | None = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.sink = sink if sink is not None else MemorySink()
        self.errors: list[EvaluationFailure] = []
        self._ids = itertools.count(1)
        self._graph = DependencyGraph()
        # Calcs are held weakly: one nobody references is garbage.
        self._nodes: weakref.WeakValueDictionary[int, Calc | Observer] = (
            weakref.WeakValueDictionary()
        )
        self._observers: dict[int, Observer] = {}
        self._bindings: dict[str, OutputBinding] = {}
        self._pending: dict[int, Observer] = {}
        self._batch_depth = 0
        self._flushing = False
        self._closed = False
        self._raise_after_flush: Exception | None = None
        self._error_callbacks: list[Callable[[EvaluationFailure], None]] = []
        self._ended_callbacks: list[Callable[[], None]] = []
        self._tokens: list = []
        self._scheduler = None
        self._scheduler_thread = None
        if scheduler is not None:
            self.set_scheduler(scheduler)
        self.input = Inputs(self)

    # ─── Context ─────────────────────────────────────────────────────────

    def __enter__(self) -> Session:
        self._tokens.append(_current_session.set(self))
        return self

    def __exit__(self, *exc_info) -> None:
        _current_session.reset(self._tokens.pop())

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def closed(self) -> bool:
        return self._closed

    # ─── Declarations ────────────────────────────────────────────────────

    def value(self, initial: Any = None) -> Value:
        return Value(initial, session=self)

    def calc(self, fn: Callable[[], Any]) -> Calc:
        return Calc(fn, session=self)

    def effect(self, fn: Callable[[], Any]) -> Effect:
        return Effect(fn, session=self)

    def observe_event(self, *args, ignore_none: bool = False):
        return observe_event(*args, ignore_none=ignore_none, session=self)

    def event_reactive(self, *args, ignore_none: bool = False):
        return event_reactive(*args, ignore_none=ignore_none, session=self)

    def output(self, name: str | Callable | None = None):
        return output(name, session=self)

    def bind(self, name: str, source: Calc | Callable[[], Any]) -> OutputBinding:
        """Bind source to the output called name, replacing any previous owner."""
        return OutputBinding(name, source, session=self)

    def binding(self, name: str) -> OutputBinding | None:
        return self._bindings.get(name)

    isolate = staticmethod(isolate)

    # ─── Threads ─────────────────────────────────────────────────────────

    def set_scheduler(self, scheduler: Callable[[Callable[[], None]], Any]) -> None:
        """Marshal Value.set() calls from other threads through scheduler.

        Call from the session's own thread:
            session.set_scheduler(app.call_from_thread)
        """
        self._scheduler = scheduler
        self._scheduler_thread = threading.current_thread()

    def _dispatch(self, fn: Callable[[], None]) -> None:
        if self._scheduler is not None and threading.current_thread() != self._scheduler_thread:
            self._scheduler(fn)
        else:
            fn()

    # ─── Registry ────────────────────────────────────────────────────────

    def _next_id(self) -> int:
        if self._closed:
            raise SessionClosedError(f"session {self.name!r} is closed")
        return next(self._ids)

    def _register(self, node: Calc | Observer, *, observer: bool = False) -> int:
        node_id = self._next_id()
        self._nodes[node_id] = node
        if observer:
            self._observers[node_id] = node
        return node_id

    def _forget_observer(self, observer: Observer) -> None:
        self._graph.forget(observer._id)
        self._observers.pop(observer._id, None)
        self._pending.pop(observer._id, None)

    def _claim_output(self, name: str, binding: OutputBinding) -> None:
        previous = self._bindings.get(name)
        if previous is not None:
            logger.debug("%s: rebinding output %r", self.name, name)
            previous.dispose()
        self._bindings[name] = binding

    def _release_output(self, name: str, binding: OutputBinding) -> None:
        if self._bindings.get(name) is binding:
            del self._bindings[name]

    # ─── Scheduling ──────────────────────────────────────────────────────

    def _changed(self, producer_id: int) -> None:
        """A Value was set: invalidate downstream, then run observers."""
        self._invalidate_from(producer_id)
        self._maybe_flush()

    def _invalidate_from(self, producer_id: int) -> None:
        for node_id in self._graph.dependents(producer_id):
            node = self._nodes.get(node_id)
            if node is None:
                self._graph.forget(node_id)
                continue
            node._invalidate()

    def _schedule(self, observer: Observer) -> None:
        if not self._closed:
            self._pending[observer._id] = observer

    def _maybe_flush(self) -> None:
        if self._batch_depth == 0 and not self._flushing:
            self.flush()

    @property
    def pending_count(self) -> int:
        """Number of observers waiting to run. Useful for testing."""
        return len(self._pending)

    def flush(self) -> None:
        """Run every queued observer, declaration order first, until none are left."""
        if self._flushing or self._closed:
            return
        self._flushing = True
        passes = 0
        try:
            while self._pending:
                passes += 1
                if passes > self.config.max_flush_passes:
                    stuck = list(self._pending.values())
                    self._pending.clear()
                    self._raise_after_flush = None
                    raise FlushLimitError(
                        f"session {self.name!r}: observers still scheduled after "
                        f"{self.config.max_flush_passes} passes: {stuck!r}"
                    )
                batch = [self._pending.pop(node_id) for node_id in sorted(self._pending)]
                logger.debug("%s: pass %d, %d observers", self.name, passes, len(batch))
                for observer in batch:
                    observer._run()
        finally:
            self._flushing = False

        error, self._raise_after_flush = self._raise_after_flush, None
        if error is not None:
            raise error

    @contextmanager
    def batch(self) -> Iterator[Session]:
        """Defer flushing until the outermost batch exits. Nestable."""
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._maybe_flush()

    # ─── Errors ──────────────────────────────────────────────────────────

    def on_error(self, callback: Callable[[EvaluationFailure], None]) -> None:
        self._error_callbacks.append(callback)

    def _report(self, source: str, error: Exception) -> None:
        failure = EvaluationFailure(source, error)
        self.errors.append(failure)
        if self.config.log_errors:
            logger.error("%s: %s failed", self.name, source, exc_info=error)
        for callback in self._error_callbacks:
            callback(failure)
        if self.config.raise_on_error and self._raise_after_flush is None:
            self._raise_after_flush = error

    # ─── Lifecycle ───────────────────────────────────────────────────────

    def on_ended(self, callback: Callable[[], None]) -> None:
        self._ended_callbacks.append(callback)

    def close(self) -> None:
        """Tear down: stop every observer and binding, then run ended callbacks."""
        if self._closed:
            return
        for observer in list(self._observers.values()):
            observer.dispose()
        self._closed = True
        self._pending.clear()
        self._bindings.clear()
        for callback in self._ended_callbacks:
            try:
                callback()
            except Exception:
                logger.exception("%s: on_ended callback failed", self.name)
        self._ended_callbacks.clear()
        logger.debug("%s: closed", self.name)

    def graph_is_consistent(self) -> bool:
        """The graph's edges match every live node's lastDeps."""
        if not self._graph.is_consistent():
            return False
        return all(
            self._graph.sources(node_id) == frozenset(node._deps)
            for node_id, node in list(self._nodes.items())
        )

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"{len(self._observers)} observers"
        return f"Session({self.name!r}, {state})"
