"""Tracking of in-flight git commands.

Classes:
    CommandTracker: Emits STARTED/FINISHED events around tracked commands.
    RunningCommands: Consumer that keeps the set of running commands.

Models:
    CommandEvent: Command lifecycle event.
    RunningCommand: Identifier, description and start time of a command.
"""

from reposync.tracking._models import CommandEvent, RunningCommand
from reposync.tracking._tracker import CommandTracker, RunningCommands

__all__ = [
    "CommandEvent",
    "CommandTracker",
    "RunningCommand",
    "RunningCommands",
]
