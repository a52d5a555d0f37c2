"""Session configuration.

SessionConfig is frozen after creation; pass one to Session().
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Configuration for a reactive session.

    Attributes:
        name: Label used in log records and reprs.
        max_flush_passes: Upper bound on scheduler passes in one flush.
            Effects that keep setting values they depend on hit this limit
            instead of looping forever.
        log_errors: Log evaluation errors caught at observer boundaries.
        raise_on_error: Re-raise the first evaluation error once the
            current flush finishes. Useful in tests and during development.

    """

    name: str = "session"
    max_flush_passes: int = 100
    log_errors: bool = True
    raise_on_error: bool = False

    def __post_init__(self) -> None:
        if self.max_flush_passes < 1:
            raise ValueError("max_flush_passes must be at least 1")
