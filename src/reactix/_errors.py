"""reactix error hierarchy.

All engine errors inherit from ReactixError. SilentException is not an
error: it cancels an output without reporting anything.
"""


class ReactixError(Exception):
    """Base error for all reactix operations."""


class NoSessionError(ReactixError):
    """A reactive object was created with no session given and none current."""


class SessionClosedError(ReactixError):
    """Declaration against a session that has been torn down."""


class CrossSessionError(ReactixError):
    """A producer from one session was read inside another session's evaluation."""


class CycleError(ReactixError):
    """A Calc read itself, directly or transitively, while evaluating."""


class FlushLimitError(ReactixError):
    """Observers kept rescheduling each other past the configured pass limit."""


class SilentException(Exception):
    """Abort the current evaluation quietly. Outputs are cleared, not errored."""


def req(*values):
    """Raise SilentException unless every value is truthy.

    Returns the first value so it can be used inline:
        n = req(input.get("n"))
    """
    for value in values:
        if not value:
            raise SilentException()
    return values[0] if values else None
