# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Layer sources for reposync configuration.

Each source (``config.toml``, ``REPOSYNC_*`` environment variables, CLI
overrides) is reduced to a plain nested dict here; `Config.load` merges them.
"""

from __future__ import annotations

import os
import re
import tomllib
from contextlib import suppress
from typing import TYPE_CHECKING, Any

import orjson

from reposync.exceptions import ConfigLoadError

if TYPE_CHECKING:
    from pathlib import Path

ENV_PREFIX = "REPOSYNC_"
SECTION_SEPARATOR = "__"

# tomllib only exposes lineno and colno from Python 3.14
_LOCATION = re.compile(r"\(at line (\d+), column (\d+)\)")


def _error_location(error: tomllib.TOMLDecodeError) -> tuple[int | None, int | None]:
    line: int | None = getattr(error, "lineno", None)
    column: int | None = getattr(error, "colno", None)
    if line is None:
        match = _LOCATION.search(str(error))
        if match is not None:
            line, column = int(match.group(1)), int(match.group(2))
    return line, column


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Load ``config.toml`` into a dict.

    Raises:
        FileNotFoundError: When `path` is missing. Callers check existence
            first, since a missing config file just means defaults.
        ConfigLoadError: On malformed TOML, carrying the line and column.
    """
    try:
        with path.open("rb") as stream:
            return tomllib.load(stream)
    except tomllib.TOMLDecodeError as e:
        line, column = _error_location(e)
        raise ConfigLoadError(
            f"Invalid TOML in {path.name}: {e}", path=path, line=line, column=column
        ) from e


def copy_value(value: Any) -> Any:  # pyright: ignore[reportExplicitAny]  # noqa: ANN401
    """Deep copy a configuration value made of dicts, lists and scalars."""
    if isinstance(value, dict):
        return {k: copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [copy_value(item) for item in value]
    return value


def deep_merge(
    base: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    override: dict[str, Any],  # pyright: ignore[reportExplicitAny]
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Layer `override` on top of `base` and return the result as a new dict.

    Tables present on both sides merge key by key. Anything else in
    `override`, lists included, replaces the `base` value wholesale. Neither
    argument is mutated.
    """
    merged: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
        key: copy_value(value) for key, value in base.items()
    }
    for key, incoming in override.items():
        current = merged.get(key)
        both_tables = isinstance(current, dict) and isinstance(incoming, dict)
        merged[key] = deep_merge(current, incoming) if both_tables else copy_value(incoming)
    return merged


def _looks_like_json(value: str) -> bool:
    return (value[:1], value[-1:]) in {("[", "]"), ("{", "}")}


def parse_string_value(value: str) -> Any:  # pyright: ignore[reportExplicitAny]  # noqa: ANN401
    """Turn a textual setting into the value it most plausibly denotes.

    ``true``/``false`` in any case become booleans, digits become an int (or a
    float when a dot is present), bracketed text is tried as JSON, and
    anything else stays a string. Shared by the environment layer and
    ``reposync settings set``.

    Examples:
        >>> parse_string_value("False")
        False
        >>> parse_string_value("60")
        60
        >>> parse_string_value('["main", "release/*"]')
        ['main', 'release/*']
        >>> parse_string_value("dulwich")
        'dulwich'
    """
    folded = value.lower()
    if folded in {"true", "false"}:
        return folded == "true"

    number = float if "." in value else int
    with suppress(ValueError):
        return number(value)

    if _looks_like_json(value):
        with suppress(orjson.JSONDecodeError):
            return orjson.loads(value)

    return value


def set_nested_key(
    d: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    key_path: str,
    value: Any,  # pyright: ignore[reportExplicitAny]  # noqa: ANN401
) -> None:
    """Assign `value` at a dotted path such as ``git.backend``.

    Missing tables along the path are created; a scalar sitting where a table
    is needed is replaced by one.
    """
    *tables, leaf = key_path.split(".")
    node = d
    for name in tables:
        child = node.get(name)
        if not isinstance(child, dict):
            child = node[name] = {}
        node = child
    node[leaf] = value


def parse_env_vars(
    prefix: str = ENV_PREFIX,
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Collect ``<prefix>SECTION__KEY`` environment variables as nested config.

    ``REPOSYNC_GIT__BACKEND=dulwich`` becomes ``{"git": {"backend": "dulwich"}}``.
    Variables without a section separator, such as ``REPOSYNC_DEBUG``, are
    process switches read elsewhere and are skipped.
    """
    collected: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    for name, raw in os.environ.items():
        if not name.startswith(prefix):
            continue
        suffix = name.removeprefix(prefix)
        if SECTION_SEPARATOR not in suffix:
            continue
        dotted = suffix.replace(SECTION_SEPARATOR, ".").lower()
        set_nested_key(collected, dotted, parse_string_value(raw))
    return collected
