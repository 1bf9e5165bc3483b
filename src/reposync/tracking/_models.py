"""Command tracking models."""

from dataclasses import dataclass

from reposync.enums import CommandEventType


@dataclass(frozen=True, slots=True)
class RunningCommand:
    """A git command that has been dispatched and not yet finished.

    Attributes:
        id: Process-unique command identifier.
        description: Human-readable command description.
        started_at: Start time as epoch milliseconds.
    """

    id: int
    description: str
    started_at: int


@dataclass(frozen=True, slots=True)
class CommandEvent:
    """Immutable command lifecycle event.

    Attributes:
        event_type: STARTED or FINISHED.
        id: Identifier of the command the event belongs to.
        description: Human-readable command description.
        timestamp: Event time as epoch milliseconds.
        duration_ms: Elapsed time, FINISHED events only.
        succeeded: Whether the command completed without error, FINISHED only.
    """

    event_type: CommandEventType
    id: int
    description: str
    timestamp: int
    duration_ms: float | None = None
    succeeded: bool | None = None
