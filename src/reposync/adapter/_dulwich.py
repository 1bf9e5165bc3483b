"""Library-driven git adapter built on dulwich.

Every operation runs in a worker thread through anyio.to_thread.run_sync and
opens its own Repo handle there, so no handle is ever shared between threads.
"""

from __future__ import annotations

import functools
import io
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Final, cast, final, override

import anyio.to_thread
from dulwich import porcelain
from dulwich.index import ConflictedIndexEntry
from dulwich.repo import Repo
from dulwich.stash import Stash

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
    from collections.abc import Callable, Sequence

    from dulwich.objects import Commit
    from structlog.typing import FilteringBoundLogger

    from reposync.tracking import CommandTracker

_STAGED_CODES: Final = {"add": "A", "delete": "D", "modify": "M"}

_RAW_COMMANDS: Final = frozenset(
    {
        ("remote",),
        ("remote", "-v"),
        ("rev-parse", "HEAD"),
        ("rev-parse", "--abbrev-ref", "HEAD"),
        ("branch", "--show-current"),
    }
)

_HEADS_PREFIX: Final = b"refs/heads/"


def _decode(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _conflict_code(entry: ConflictedIndexEntry) -> str:
    """Map the stages present for an unmerged path to its porcelain code."""
    stages = (
        entry.ancestor is not None,
        entry.this is not None,
        entry.other is not None,
    )
    match stages:
        case (True, False, False):
            return "DD"
        case (False, True, False):
            return "AU"
        case (True, True, False):
            return "UD"
        case (False, False, True):
            return "UA"
        case (True, False, True):
            return "DU"
        case (False, True, True):
            return "AA"
        case _:
            return "UU"


def _current_branch(repo: Repo) -> str:
    head_ref = repo.refs.get_symrefs().get(b"HEAD")
    if head_ref is None or not head_ref.startswith(_HEADS_PREFIX):
        return ""
    return _decode(head_ref.removeprefix(_HEADS_PREFIX))


def _resolve_ref(repo: Repo, name: str) -> bytes | None:
    """Resolve a short or full ref name to a commit SHA, None when missing."""
    raw = name.encode()
    for candidate in (
        raw,
        b"refs/" + raw,
        b"refs/heads/" + raw,
        b"refs/remotes/" + raw,
        b"refs/tags/" + raw,
    ):
        try:
            return repo.refs[candidate]
        except KeyError:
            continue
    return None


def _commit_info(commit: Commit) -> CommitInfo:
    author = _decode(commit.author)
    if "<" in author and author.endswith(">"):
        name, _, email = author.rpartition("<")
        author_name, author_email = name.strip(), email.rstrip(">")
    else:
        author_name, author_email = author, ""

    # dulwich reports the offset in seconds east of UTC
    tz = timezone(timedelta(seconds=commit.author_timezone))
    date = datetime.fromtimestamp(commit.author_time, tz=tz).isoformat()

    subject, _, body = _decode(commit.message).partition("\n")
    return CommitInfo(
        hash=_decode(commit.id),
        date=date,
        author_name=author_name,
        author_email=author_email,
        message=subject.strip(),
        body=body.strip(),
    )


@final
class DulwichGitAdapter(BaseGitAdapter):
    """Git adapter backed by the pure-Python dulwich library.

    Only a fixed set of read-only commands is available through raw().
    """

    backend_name = GitBackend.DULWICH

    def __init__(
        self,
        identity: str | Path,
        *,
        tracker: CommandTracker | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            identity: Repository path.
            tracker: Command tracker.
            logger: Logger for diagnostics.
        """
        super().__init__(identity, tracker=tracker, logger=logger)

    async def _in_thread[T](
        self, description: str, func: Callable[..., T], *args: object
    ) -> T:
        """Run func in a worker thread, translating failures to AdapterError."""
        try:
            return await anyio.to_thread.run_sync(functools.partial(func, *args))
        except AdapterError:
            raise
        except Exception as e:  # noqa: BLE001
            diagnostic = str(e) or type(e).__name__
            raise AdapterError(
                diagnostic, command=description, diagnostic=diagnostic
            ) from e

    def _repo(self) -> Repo:
        return Repo(self._identity)

    # =========================================================================
    # Worker-thread bodies
    # =========================================================================

    def _read_status(self) -> GitStatus:
        with self._repo() as repo:
            index = repo.open_index()
            conflicts = {
                _decode(path): _conflict_code(entry)
                for path, entry in index.items()
                if isinstance(entry, ConflictedIndexEntry)
            }
            result = porcelain.status(repo, untracked_files="all")
            root = Path(self._identity)

            codes: dict[str, list[str]] = {}
            staged = cast("dict[str, list[bytes]]", result.staged)
            for change_type, paths in staged.items():
                for path in paths:
                    codes.setdefault(_decode(path), [" ", " "])[0] = (
                        _STAGED_CODES.get(change_type, "M")
                    )
            for path in cast("list[bytes]", result.unstaged):
                name = _decode(path)
                code = "M" if (root / name).exists() else "D"
                codes.setdefault(name, [" ", " "])[1] = code
            for path in cast("list[bytes | str]", result.untracked):
                codes[_decode(path).replace("\\", "/")] = ["?", "?"]

            files = [
                StatusFile(path=path, index=code[0], working_dir=code[1])
                for path, code in codes.items()
                if path not in conflicts
            ]
            files.extend(
                StatusFile(path=path, index=code[0], working_dir=code[1])
                for path, code in conflicts.items()
            )
            files.sort(key=lambda f: f.path)
            return GitStatus(current=_current_branch(repo), files=tuple(files))

    def _read_branches(self) -> BranchSummary:
        with self._repo() as repo:
            names = sorted(_decode(n) for n in repo.refs.keys(base=_HEADS_PREFIX))
            return BranchSummary(all=tuple(names))

    def _count_divergence(self, branch: str, upstream: str) -> AheadBehind:
        with self._repo() as repo:
            upstream_sha = _resolve_ref(repo, upstream)
            if upstream_sha is None:
                return AheadBehind()
            branch_sha = _resolve_ref(repo, branch)
            if branch_sha is None:
                msg = f"unknown revision '{branch}'"
                raise AdapterError(msg, command=f"rev-list {branch}...{upstream}")
            ahead = sum(
                1 for _ in repo.get_walker(include=[branch_sha], exclude=[upstream_sha])
            )
            behind = sum(
                1 for _ in repo.get_walker(include=[upstream_sha], exclude=[branch_sha])
            )
            return AheadBehind(ahead=ahead, behind=behind)

    def _read_stashes(self) -> StashList:
        with self._repo() as repo:
            stashes = tuple(
                StashInfo(
                    index=index,
                    ref=f"stash@{{{index}}}",
                    hash=_decode(entry.new_sha),
                    message=_decode(entry.message),
                )
                for index, entry in enumerate(Stash.from_repo(repo).stashes())
            )
            return StashList(all=stashes)

    def _read_origin_url(self) -> str:
        with self._repo() as repo:
            try:
                return _decode(repo.get_config().get((b"remote", b"origin"), b"url"))
            except KeyError:
                return ""

    def _remotes(self, repo: Repo) -> list[tuple[str, str, str]]:
        config = repo.get_config()
        remotes: list[tuple[str, str, str]] = []
        for section in config.sections():
            if len(section) != 2 or section[0] != b"remote":  # noqa: PLR2004
                continue
            try:
                url = _decode(config.get(section, b"url"))
            except KeyError:
                continue
            try:
                push_url = _decode(config.get(section, b"pushurl"))
            except KeyError:
                push_url = url
            remotes.append((_decode(section[1]), url, push_url))
        return remotes

    def _run_raw(self, argv: tuple[str, ...]) -> str:
        with self._repo() as repo:
            match argv:
                case ("remote",):
                    return "".join(f"{name}\n" for name, _, _ in self._remotes(repo))
                case ("remote", "-v"):
                    return "".join(
                        f"{name}\t{url} (fetch)\n{name}\t{push_url} (push)\n"
                        for name, url, push_url in self._remotes(repo)
                    )
                case ("rev-parse", "HEAD"):
                    try:
                        return _decode(repo.head()) + "\n"
                    except KeyError as e:
                        msg = "ambiguous argument 'HEAD': unknown revision"
                        raise AdapterError(msg, command="rev-parse HEAD") from e
                case ("rev-parse", "--abbrev-ref", "HEAD"):
                    return (_current_branch(repo) or "HEAD") + "\n"
                case _:
                    return _current_branch(repo) + "\n"

    def _read_log(self, branch: str, max_count: int) -> list[CommitInfo]:
        with self._repo() as repo:
            sha = _resolve_ref(repo, branch)
            if sha is None:
                msg = f"unknown revision '{branch}'"
                raise AdapterError(msg, command=f"log {branch}")
            walker = repo.get_walker(include=[sha], max_entries=max_count)
            return [_commit_info(entry.commit) for entry in walker]

    def _do_clone(self, url: str, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        errors = io.BytesIO()
        repo = porcelain.clone(url, str(target), checkout=True, errstream=errors)
        repo.close()
        self._logger.debug(
            "clone_output", url=url, output=_decode(errors.getvalue()).strip()
        )

    def _do_init(self) -> None:
        path = Path(self._identity)
        path.mkdir(parents=True, exist_ok=True)
        porcelain.init(str(path)).close()

    def _check_repo(self) -> None:
        if not Path(self._identity).is_dir():
            msg = f"Repository path does not exist: {self._identity}"
            raise AdapterError(msg, command="open")
        self._repo().close()

    # =========================================================================
    # Template Method hooks
    # =========================================================================

    @override
    async def _open_repo(self) -> None:
        await self._in_thread("open", self._check_repo)

    @override
    async def _status(self) -> GitStatus:
        return await self._in_thread("status", self._read_status)

    @override
    async def _branch_local(self) -> BranchSummary:
        return await self._in_thread("branch", self._read_branches)

    @override
    async def _ahead_behind(self, branch: str, upstream: str) -> AheadBehind:
        return await self._in_thread(
            f"rev-list {branch}...{upstream}", self._count_divergence, branch, upstream
        )

    @override
    async def _stash_list(self) -> StashList:
        return await self._in_thread("stash list", self._read_stashes)

    @override
    async def _origin_url(self) -> str:
        return await self._in_thread("remote get-url origin", self._read_origin_url)

    @override
    async def _raw(self, argv: Sequence[str]) -> str:
        command = tuple(argv)
        if command not in _RAW_COMMANDS:
            msg = f"git {' '.join(command)} is not supported by the dulwich backend"
            raise AdapterError(msg, command=" ".join(command))
        return await self._in_thread(" ".join(command), self._run_raw, command)

    @override
    async def _log(self, branch: str, max_count: int) -> list[CommitInfo]:
        return await self._in_thread(f"log {branch}", self._read_log, branch, max_count)

    @override
    async def _clone(self, url: str, target: Path) -> None:
        await self._in_thread(f"clone {url}", self._do_clone, url, target)

    @override
    async def _init(self) -> None:
        await self._in_thread("init", self._do_init)
