"""reactix: session-scoped reactive dependency engine for UI/server-split apps."""

from importlib.metadata import version as _version

__version__ = _version("reactix")

from reactix._errors import (
    CrossSessionError,
    CycleError,
    FlushLimitError,
    NoSessionError,
    ReactixError,
    SessionClosedError,
    SilentException,
    req,
)
from reactix._tracking import current_session, isolate
from reactix.config import SessionConfig
from reactix.value import Value
from reactix.calc import Calc, calc
from reactix.effect import Effect, effect
from reactix.event import EventCalc, EventEffect, event_reactive, observe_event
from reactix.output import MemorySink, OutputBinding, Sink, output
from reactix.inputs import Inputs
from reactix.action import action, transaction
from reactix.session import EvaluationFailure, Session
from reactix import render
# textual NOT auto-imported: opt-in only

__all__ = [
    "Session",
    "SessionConfig",
    "EvaluationFailure",
    "current_session",
    "Value",
    "Calc",
    "calc",
    "Effect",
    "effect",
    "EventCalc",
    "EventEffect",
    "observe_event",
    "event_reactive",
    "isolate",
    "OutputBinding",
    "output",
    "Sink",
    "MemorySink",
    "Inputs",
    "render",
    "action",
    "transaction",
    "req",
    "ReactixError",
    "NoSessionError",
    "SessionClosedError",
    "CrossSessionError",
    "CycleError",
    "FlushLimitError",
    "SilentException",
]
