"""Enumeration types for reposync."""

from enum import StrEnum


class FileStatus(StrEnum):
    """Normalized classification of a changed file."""

    UNMODIFIED = "unmodified"
    MODIFIED = "modified"
    CREATED = "created"
    DELETED = "deleted"
    RENAMED = "renamed"
    CONFLICT = "conflict"


class GitBackend(StrEnum):
    """Git execution technologies an adapter can be built on."""

    CLI = "cli"
    DULWICH = "dulwich"


class CommandEventType(StrEnum):
    """Lifecycle events emitted for tracked git commands."""

    STARTED = "started"
    FINISHED = "finished"
