"""Cache key derivation.

A key is a filesystem-safe rendering of the repository identity followed by
a 32-bit rolling hash of it. The safe part alone is lossy ("/repo:A" and
"/repo?A" both become "_repo_A"); the hash keeps such identities apart.
Both parts work on UTF-16 code units so keys stay stable across platforms
and match keys written by earlier clients.
"""

from pathlib import Path
from typing import Final

_INT32_MASK: Final = 0xFFFFFFFF
_INT32_SIGN: Final = 0x80000000


def _utf16_units(text: str) -> list[int]:
    data = text.encode("utf-16-le", errors="surrogatepass")
    return [int.from_bytes(data[i : i + 2], "little") for i in range(0, len(data), 2)]


def _is_safe_unit(unit: int) -> bool:
    return (
        0x30 <= unit <= 0x39  # noqa: PLR2004
        or 0x41 <= unit <= 0x5A  # noqa: PLR2004
        or 0x61 <= unit <= 0x7A  # noqa: PLR2004
    )


def canonical_identity(path: str | Path) -> str:
    """Canonical string form of a repository path."""
    return str(Path(path).expanduser().resolve())


def safe_name(identity: str) -> str:
    """Replace every UTF-16 code unit outside [A-Za-z0-9] with an underscore."""
    return "".join(chr(u) if _is_safe_unit(u) else "_" for u in _utf16_units(identity))


def hash_identity(identity: str) -> str:
    """Rolling h = h * 31 + unit hash over UTF-16 code units.

    The accumulator wraps to a signed 32-bit integer after every step.

    Returns:
        Absolute value of the hash as lowercase hex.
    """
    h = 0
    for unit in _utf16_units(identity):
        h = (h * 31 + unit) & _INT32_MASK
    if h & _INT32_SIGN:
        h -= 1 << 32
    return format(abs(h), "x")


def cache_key(identity: str) -> str:
    """Cache key for a repository identity: safe name, underscore, hash."""
    return f"{safe_name(identity)}_{hash_identity(identity)}"
