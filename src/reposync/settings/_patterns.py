"""Branch protection pattern matching."""

import re
from collections.abc import Iterable


def matches_branch_pattern(branch: str, pattern: str) -> bool:
    """Check a branch name against one protection pattern.

    Patterns ending in "/*" match by prefix ("release/*" matches
    "release/1.0"). Other patterns containing "*" match the whole name with
    "*" standing for any run of characters. Everything else is an exact
    match.
    """
    if pattern.endswith("/*"):
        return branch.startswith(pattern[:-1])
    if "*" in pattern:
        regex = ".*".join(re.escape(part) for part in pattern.split("*"))
        return re.fullmatch(regex, branch) is not None
    return branch == pattern


def matches_any_pattern(branch: str, patterns: Iterable[str]) -> bool:
    """Whether the branch matches at least one pattern."""
    return any(matches_branch_pattern(branch, pattern) for pattern in patterns)
