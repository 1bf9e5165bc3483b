"""Command tracker.

Wraps git operations with a unique id and start/finish events delivered to
any number of subscribers over anyio memory object streams.
"""

from __future__ import annotations

import itertools
import math
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, final

import anyio

from reposync.enums import CommandEventType
from reposync.utils import create_null_logger, now_ms

from ._models import CommandEvent, RunningCommand

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from anyio.streams.memory import (
        MemoryObjectReceiveStream,
        MemoryObjectSendStream,
    )
    from structlog.typing import FilteringBoundLogger

# Shared by every tracker so ids stay unique for the whole process.
_command_ids = itertools.count(1)


@final
class CommandTracker:
    """Publishes lifecycle events for tracked git commands.

    Example:
        >>> tracker = CommandTracker()
        >>> events = tracker.subscribe()
        >>> async with tracker.track("git status"):
        ...     ...
    """

    __slots__ = ("_logger", "_running", "_subscribers")

    def __init__(self, *, logger: FilteringBoundLogger | None = None) -> None:
        """Initialize the tracker.

        Args:
            logger: Logger for finished-command records.
        """
        self._logger = logger if logger is not None else create_null_logger()
        self._subscribers: list[MemoryObjectSendStream[CommandEvent]] = []
        self._running: dict[int, RunningCommand] = {}

    @property
    def running(self) -> tuple[RunningCommand, ...]:
        """Commands currently in flight, oldest first."""
        return tuple(self._running.values())

    @property
    def subscriber_count(self) -> int:
        """Number of live subscribers."""
        return len(self._subscribers)

    def subscribe(
        self, max_buffer_size: float = math.inf
    ) -> MemoryObjectReceiveStream[CommandEvent]:
        """Register a new subscriber.

        Closing the returned stream unsubscribes; the tracker drops the
        subscriber on its next publish.

        Args:
            max_buffer_size: Events buffered before new ones are dropped for
                this subscriber. Unbounded by default.

        Returns:
            A receive stream yielding every event published from now on.
        """
        send, receive = anyio.create_memory_object_stream[CommandEvent](
            max_buffer_size
        )
        self._subscribers.append(send)
        return receive

    def close(self) -> None:
        """Close every subscriber stream, ending their iteration."""
        for send in self._subscribers:
            send.close()
        self._subscribers.clear()

    def _publish(self, event: CommandEvent) -> None:
        for send in list(self._subscribers):
            try:
                send.send_nowait(event)
            except (anyio.BrokenResourceError, anyio.ClosedResourceError):
                self._subscribers.remove(send)
                send.close()
            except anyio.WouldBlock:
                self._logger.warning(
                    "command_event_dropped",
                    command_id=event.id,
                    event_type=event.event_type,
                )

    @asynccontextmanager
    async def track(self, description: str) -> AsyncIterator[RunningCommand]:
        """Track one command for the duration of the block.

        Emits STARTED on entry and FINISHED on exit, whether the block
        completes or raises. Exceptions propagate unchanged.

        Args:
            description: Human-readable command description.

        Yields:
            The RunningCommand record for this command.
        """
        command = RunningCommand(
            id=next(_command_ids),
            description=description,
            started_at=now_ms(),
        )
        self._running[command.id] = command
        self._publish(
            CommandEvent(
                event_type=CommandEventType.STARTED,
                id=command.id,
                description=description,
                timestamp=command.started_at,
            )
        )
        started = anyio.current_time()
        succeeded = False
        try:
            yield command
            succeeded = True
        finally:
            duration_ms = (anyio.current_time() - started) * 1000
            del self._running[command.id]
            self._publish(
                CommandEvent(
                    event_type=CommandEventType.FINISHED,
                    id=command.id,
                    description=description,
                    timestamp=now_ms(),
                    duration_ms=duration_ms,
                    succeeded=succeeded,
                )
            )
            self._logger.debug(
                "git_command",
                command_id=command.id,
                command=description,
                duration_ms=round(duration_ms, 3),
                succeeded=succeeded,
            )


@final
class RunningCommands:
    """Maintains the set of in-flight commands from tracker events.

    Mirrors what a status bar shows: a command appears on STARTED and
    disappears on FINISHED.
    """

    __slots__ = ("_commands",)

    def __init__(self) -> None:
        """Initialize with no running commands."""
        self._commands: dict[int, RunningCommand] = {}

    @property
    def commands(self) -> tuple[RunningCommand, ...]:
        """Running commands, oldest first."""
        return tuple(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)

    def apply(self, event: CommandEvent) -> None:
        """Update the set from one event."""
        if event.event_type == CommandEventType.STARTED:
            self._commands[event.id] = RunningCommand(
                id=event.id,
                description=event.description,
                started_at=event.timestamp,
            )
        else:
            _ = self._commands.pop(event.id, None)

    async def consume(self, events: MemoryObjectReceiveStream[CommandEvent]) -> None:
        """Apply events until the stream is closed."""
        async with events:
            async for event in events:
                self.apply(event)
