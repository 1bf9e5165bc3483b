"""Status code classification."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final

from reposync.adapter import StatusFile
from reposync.cache import FileEntry
from reposync.enums import FileStatus

CONFLICT_CODES: Final = frozenset({"AA", "DD", "UU", "AU", "UA", "DU", "UD"})

_CODE_STATUS: Final = {
    " ": FileStatus.UNMODIFIED,
    "M": FileStatus.MODIFIED,
    "A": FileStatus.CREATED,
    "D": FileStatus.DELETED,
    "R": FileStatus.RENAMED,
    "?": FileStatus.CREATED,
    "U": FileStatus.CONFLICT,
}


def classify_status_code(code: str) -> FileStatus:
    """Map a one- or two-letter git status code to a FileStatus.

    Unrecognized codes are treated as modified.

    Example:
        >>> classify_status_code("A")
        <FileStatus.CREATED: 'created'>
        >>> classify_status_code("UD")
        <FileStatus.CONFLICT: 'conflict'>
    """
    if code in CONFLICT_CODES:
        return FileStatus.CONFLICT
    return _CODE_STATUS.get(code, FileStatus.MODIFIED)


def _is_blank(code: str) -> bool:
    return code in ("", " ")


@dataclass(frozen=True, slots=True)
class StatusSplit:
    """Status entries partitioned for display.

    Attributes:
        staged: Paths with only an index change.
        unstaged: Paths with a working-tree change.
        partially_staged: Unstaged paths that also carry an index change.
    """

    staged: tuple[FileEntry, ...]
    unstaged: tuple[FileEntry, ...]
    partially_staged: tuple[str, ...]

    @property
    def modified_count(self) -> int:
        """Number of distinct paths across both lists."""
        return len({e.path for e in self.staged} | {e.path for e in self.unstaged})


def split_status_files(files: Iterable[StatusFile]) -> StatusSplit:
    """Partition status entries into staged and unstaged lists.

    A path with a working-tree code is unstaged, classified by that code.
    Otherwise a path with an index code other than '?' is staged. A path
    appears in at most one list; when it carries both codes its path is also
    recorded as partially staged. Unmerged paths are conflicts whichever
    column holds the code.
    """
    staged: list[FileEntry] = []
    unstaged: list[FileEntry] = []
    partial: list[str] = []

    for file in files:
        conflict = file.code in CONFLICT_CODES
        if not _is_blank(file.working_dir):
            status = FileStatus.CONFLICT if conflict else classify_status_code(file.working_dir)
            unstaged.append(FileEntry(path=file.path, status=status))
            if not conflict and not _is_blank(file.index) and file.index != "?":
                partial.append(file.path)
        elif not _is_blank(file.index) and file.index != "?":
            status = FileStatus.CONFLICT if conflict else classify_status_code(file.index)
            staged.append(FileEntry(path=file.path, status=status))

    return StatusSplit(
        staged=tuple(staged),
        unstaged=tuple(unstaged),
        partially_staged=tuple(partial),
    )
