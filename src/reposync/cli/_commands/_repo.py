# pyright: reportUnusedCallResult=false
# ruff: noqa: D415, FBT002, TC003  # Path needed at runtime for cyclopts parameter parsing
"""Repository commands: status, log, stashes, init, clone."""

from pathlib import Path
from typing import Annotated

from cyclopts import Parameter
from rich.console import Console
from rich.table import Table

from reposync.adapter import CommitInfo
from reposync.cache import Snapshot
from reposync.service import RepositoryService
from reposync.sync import SyncResult

from ._shared import format_json, get_console, run_with_service

__all__ = ["clone", "init", "log", "stashes", "status"]


def _print_snapshot(console: Console, identity: str, result: SyncResult) -> None:
    snapshot = result.snapshot
    branch = snapshot.current_branch or "(detached HEAD)"
    console.print(f"[bold]{identity}[/bold] on [cyan]{branch}[/cyan]")
    if snapshot.origin_url:
        console.print(f"[dim]origin: {snapshot.origin_url}[/dim]")
    if result.from_cache:
        console.print("[dim]served from cache; pass --refresh to re-read[/dim]")

    if snapshot.staged_files:
        console.print("[bold green]Staged:[/bold green]")
        for entry in snapshot.staged_files:
            console.print(f"  [green]{entry.status.value:<10}[/green] {entry.path}")

    if snapshot.unstaged_files:
        console.print("[bold yellow]Unstaged:[/bold yellow]")
        partial = set(snapshot.partially_staged)
        for entry in snapshot.unstaged_files:
            marker = " [dim](partially staged)[/dim]" if entry.path in partial else ""
            console.print(f"  [yellow]{entry.status.value:<10}[/yellow] {entry.path}{marker}")

    if not snapshot.modified_count:
        console.print("[dim]Working tree clean[/dim]")
    else:
        console.print(f"\n[dim]{snapshot.modified_count} changed path(s)[/dim]")

    if snapshot.branch_status:
        table = Table(title="Diverged branches")
        table.add_column("Branch")
        table.add_column("Ahead", justify="right")
        table.add_column("Behind", justify="right")
        for name, counts in sorted(snapshot.branch_status.items()):
            table.add_row(name, str(counts.ahead), str(counts.behind))
        console.print(table)

    if snapshot.stashes:
        console.print(f"[dim]{len(snapshot.stashes)} stash(es)[/dim]")


def status(
    path: Annotated[Path, Parameter(help="Repository path")] = Path(),
    *,
    refresh: Annotated[
        bool, Parameter(name=["--refresh", "-r"], help="Ignore the cache and re-read")
    ] = False,
    json: Annotated[bool, Parameter(name="--json", help="Print the snapshot as JSON")] = False,
) -> None:
    """Show the synchronized state of a repository"""

    async def operation(service: RepositoryService) -> SyncResult:
        if refresh:
            return await service.refresh(path, force=True)
        return await service.open_repository(path)

    result = run_with_service(operation)
    console = get_console()
    if json:
        console.print(format_json(result.snapshot.to_record_data()), markup=False)
        return
    _print_snapshot(console, str(path.expanduser().resolve()), result)


def _print_commits(console: Console, branch: str, commits: tuple[CommitInfo, ...]) -> None:
    if not commits:
        console.print(f"[dim]No commits on {branch}[/dim]")
        return
    table = Table(title=f"Commits on {branch}")
    table.add_column("Hash", style="yellow")
    table.add_column("Date")
    table.add_column("Author")
    table.add_column("Message")
    for commit in commits:
        table.add_row(commit.hash[:8], commit.date, commit.author_name, commit.message)
    console.print(table)


def log(
    path: Annotated[Path, Parameter(help="Repository path")],
    branch: Annotated[str, Parameter(help="Branch name")],
    *,
    max_count: Annotated[
        int | None,
        Parameter(name=["--max-count", "-n"], help="Commits to load (default: maxCommits)"),
    ] = None,
    no_cache: Annotated[
        bool, Parameter(name="--no-cache", help="Re-read even if the list is cached")
    ] = False,
) -> None:
    """Show the commit history of a branch"""

    async def operation(service: RepositoryService) -> tuple[CommitInfo, ...]:
        await service.open_repository(path)
        return await service.load_branch_commits(
            path, branch, max_count=max_count, use_cache=not no_cache
        )

    _print_commits(get_console(), branch, run_with_service(operation))


def stashes(path: Annotated[Path, Parameter(help="Repository path")] = Path()) -> None:
    """List the stashes of a repository"""

    async def operation(service: RepositoryService) -> Snapshot:
        await service.open_repository(path)
        return await service.refresh_stashes(path)

    snapshot = run_with_service(operation)
    console = get_console()
    if not snapshot.stashes:
        console.print("[dim]No stashes[/dim]")
        return
    for stash in snapshot.stashes:
        console.print(f"[yellow]{stash.ref}[/yellow] {stash.message}")


def init(path: Annotated[Path, Parameter(help="Directory to initialize")]) -> None:
    """Create an empty repository and open it"""

    async def operation(service: RepositoryService) -> SyncResult:
        return await service.init_repository(path)

    run_with_service(operation)
    get_console().print(f"[green]Initialized empty repository in {path}[/green]")


def clone(
    url: Annotated[str, Parameter(help="Repository URL")],
    parent: Annotated[Path, Parameter(help="Directory to clone into")],
    name: Annotated[str, Parameter(help="Name of the new directory")],
) -> None:
    """Clone a repository and open it"""

    async def operation(service: RepositoryService) -> SyncResult:
        return await service.clone_repository(url, parent, name)

    result = run_with_service(operation)
    branch = result.snapshot.current_branch or "(detached HEAD)"
    get_console().print(f"[green]Cloned {url} into {parent / name}[/green] on {branch}")
