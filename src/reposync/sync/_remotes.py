"""Parsing of `git remote -v` output."""

import re
from typing import Final

from reposync.adapter import RemoteInfo

_REMOTE_LINE: Final = re.compile(r"^(\S+)\s+(\S+)")


def parse_remotes(output: str) -> list[RemoteInfo]:
    """Parse `git remote -v` output into one entry per remote.

    Push lines are ignored, the first fetch URL of each name wins, and
    lines that do not look like "name url" are skipped.

    Example:
        >>> parse_remotes("origin\\thttps://x/r.git (fetch)\\norigin\\thttps://x/r.git (push)\\n")
        [RemoteInfo(name='origin', url='https://x/r.git')]
    """
    remotes: dict[str, RemoteInfo] = {}
    for line in output.splitlines():
        if not line.strip() or line.rstrip().endswith("(push)"):
            continue
        match = _REMOTE_LINE.match(line)
        if match is None:
            continue
        name, url = match.groups()
        if name not in remotes:
            remotes[name] = RemoteInfo(name=name, url=url)
    return list(remotes.values())
