"""Subprocess-driven git adapter.

Runs the git executable through anyio.run_process. Output is always parsed
from machine-readable formats (porcelain v1 with NUL separators, explicit
--format strings) so results do not depend on the user's git configuration.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Final, final, override

import anyio

from reposync.adapter._base import BaseGitAdapter
from reposync.adapter._models import (
    AheadBehind,
    BranchSummary,
    CommitInfo,
    GitStatus,
    StashInfo,
    StashList,
    StatusFile,
)
from reposync.enums import GitBackend
from reposync.exceptions import AdapterError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from structlog.typing import FilteringBoundLogger

    from reposync.tracking import CommandTracker

_DEFAULT_TIMEOUT: Final = 60.0

# Keep status reads from taking index.lock and never block on credentials.
_GIT_ENV: Final = {
    "GIT_OPTIONAL_LOCKS": "0",
    "GIT_TERMINAL_PROMPT": "0",
    "LC_ALL": "C",
}

_FIELD_SEP: Final = "\x1f"
_RECORD_SEP: Final = "\x1e"
_LOG_FORMAT: Final = _FIELD_SEP.join(("%H", "%aI", "%an", "%ae", "%s", "%b")) + _RECORD_SEP


def parse_branch_header(header: str) -> str:
    """Extract the current branch from a porcelain v1 '## ' header.

    Args:
        header: Header line without the leading '## '.

    Returns:
        The short branch name, or an empty string when HEAD is detached.
    """
    for prefix in ("No commits yet on ", "Initial commit on "):
        if header.startswith(prefix):
            return header.removeprefix(prefix).strip()
    if header.startswith("HEAD (no branch)"):
        return ""
    return header.split("...", 1)[0].split(" ", 1)[0]


def parse_porcelain_status(output: str) -> GitStatus:
    """Parse `git status --porcelain=v1 -z --branch --no-renames` output.

    Args:
        output: NUL-separated status output.

    Returns:
        The parsed GitStatus.
    """
    current = ""
    files: list[StatusFile] = []
    for entry in output.split("\0"):
        if not entry:
            continue
        if entry.startswith("## "):
            current = parse_branch_header(entry[3:])
            continue
        if len(entry) < 4:  # noqa: PLR2004
            continue
        files.append(StatusFile(path=entry[3:], index=entry[0], working_dir=entry[1]))
    return GitStatus(current=current, files=tuple(files))


def parse_stash_list(output: str) -> StashList:
    """Parse `git stash list --format=%H%x09%gd%x09%gs` output."""
    stashes: list[StashInfo] = []
    for line in output.splitlines():
        parts = line.split("\t", 2)
        if len(parts) != 3:  # noqa: PLR2004
            continue
        sha, ref, message = parts
        stashes.append(StashInfo(index=len(stashes), ref=ref, hash=sha, message=message))
    return StashList(all=tuple(stashes))


def parse_log(output: str) -> list[CommitInfo]:
    """Parse git log output produced with the record/field separator format."""
    commits: list[CommitInfo] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        fields = record.split(_FIELD_SEP)
        if len(fields) != 6:  # noqa: PLR2004
            continue
        sha, date, author_name, author_email, subject, body = fields
        commits.append(
            CommitInfo(
                hash=sha,
                date=date,
                author_name=author_name,
                author_email=author_email,
                message=subject,
                body=body.strip(),
            )
        )
    return commits


@final
class CliGitAdapter(BaseGitAdapter):
    """Git adapter backed by the git executable."""

    backend_name = GitBackend.CLI

    def __init__(
        self,
        identity: str | Path,
        *,
        executable: str = "git",
        timeout: float = _DEFAULT_TIMEOUT,
        tracker: CommandTracker | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            identity: Repository path.
            executable: Name or path of the git executable.
            timeout: Seconds before a single git process is abandoned.
            tracker: Command tracker.
            logger: Logger for diagnostics.
        """
        super().__init__(identity, tracker=tracker, logger=logger)
        self._executable = executable
        self._timeout = timeout

    async def _run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        ok_codes: tuple[int, ...] = (0,),
    ) -> subprocess.CompletedProcess[bytes]:
        """Run git and return the completed process.

        Raises:
            AdapterError: If git cannot be started, times out, or exits with
                a code outside ok_codes.
        """
        command = [self._executable, *args]
        description = " ".join(command)
        try:
            with anyio.fail_after(self._timeout):
                result = await anyio.run_process(
                    command,
                    cwd=cwd if cwd is not None else self._identity,
                    env={**os.environ, **_GIT_ENV},
                    check=False,
                )
        except TimeoutError as e:
            msg = f"{description} timed out after {self._timeout}s"
            raise AdapterError(msg, command=description) from e
        except OSError as e:
            msg = f"Failed to run {description}: {e}"
            raise AdapterError(msg, command=description, diagnostic=str(e)) from e

        if result.returncode not in ok_codes:
            stderr = result.stderr.decode(errors="replace").strip()
            msg = stderr or f"{description} exited with code {result.returncode}"
            raise AdapterError(
                msg,
                command=description,
                diagnostic=stderr,
                exit_code=result.returncode,
            )
        return result

    async def _output(self, args: Sequence[str]) -> str:
        result = await self._run(args)
        return result.stdout.decode(errors="replace")

    @override
    async def _open_repo(self) -> None:
        if not Path(self._identity).is_dir():
            msg = f"Repository path does not exist: {self._identity}"
            raise AdapterError(msg, command="open")
        _ = await self._run(["rev-parse", "--git-dir"])

    @override
    async def _status(self) -> GitStatus:
        output = await self._output(
            [
                "status",
                "--porcelain=v1",
                "-z",
                "--branch",
                "--no-renames",
                "--untracked-files=all",
            ]
        )
        return parse_porcelain_status(output)

    @override
    async def _branch_local(self) -> BranchSummary:
        output = await self._output(
            ["for-each-ref", "--format=%(refname)", "refs/heads/"]
        )
        names = (
            line.removeprefix("refs/heads/")
            for line in output.splitlines()
            if line.startswith("refs/heads/")
        )
        return BranchSummary(all=tuple(sorted(names)))

    @override
    async def _ahead_behind(self, branch: str, upstream: str) -> AheadBehind:
        upstream_check = await self._run(
            ["rev-parse", "--verify", "--quiet", f"{upstream}^{{commit}}"],
            ok_codes=(0, 1),
        )
        if upstream_check.returncode != 0:
            return AheadBehind()

        output = await self._output(
            ["rev-list", "--left-right", "--count", f"{branch}...{upstream}", "--"]
        )
        left, _, right = output.strip().partition("\t")
        try:
            return AheadBehind(ahead=int(left), behind=int(right))
        except ValueError as e:
            msg = f"Unexpected rev-list output: {output!r}"
            raise AdapterError(msg, command="git rev-list") from e

    @override
    async def _stash_list(self) -> StashList:
        output = await self._output(["stash", "list", "--format=%H%x09%gd%x09%gs"])
        return parse_stash_list(output)

    @override
    async def _origin_url(self) -> str:
        # exit code 1 means the key is not set
        result = await self._run(
            ["config", "--get", "remote.origin.url"], ok_codes=(0, 1)
        )
        return result.stdout.decode(errors="replace").strip()

    @override
    async def _raw(self, argv: Sequence[str]) -> str:
        return await self._output(argv)

    @override
    async def _log(self, branch: str, max_count: int) -> list[CommitInfo]:
        output = await self._output(
            ["log", f"--max-count={max_count}", f"--format={_LOG_FORMAT}", branch, "--"]
        )
        return parse_log(output)

    @override
    async def _clone(self, url: str, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        _ = await self._run(["clone", "--", url, str(target)], cwd=target.parent)

    @override
    async def _init(self) -> None:
        path = Path(self._identity)
        path.mkdir(parents=True, exist_ok=True)
        _ = await self._run(["init", "--quiet", str(path)], cwd=path)
