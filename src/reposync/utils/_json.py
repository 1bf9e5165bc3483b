import tempfile
from pathlib import Path
from typing import cast

import orjson


def load_json(json_str: str | bytes) -> dict[str, object] | list[object] | None:
    """Load and parse a JSON document.

    Args:
        json_str: The JSON text to parse.

    Returns:
        The parsed JSON data as a dictionary or list, or None if parsing fails.
    """
    try:
        return cast("dict[str, object] | list[object]", orjson.loads(json_str))
    except orjson.JSONDecodeError:
        return None


def load_json_file(file_path: Path) -> dict[str, object] | list[object] | None:
    """Load and parse a JSON file.

    Args:
        file_path: Path to the JSON file.

    Returns:
        The parsed JSON data as a dictionary or list, or None if it is not valid JSON.

    Raises:
        OSError: If the file cannot be read.
    """
    return load_json(file_path.read_bytes())


def dump_json(data: object, *, indent: bool = True) -> bytes:
    """Serialize data to JSON bytes.

    Args:
        data: JSON-compatible data.
        indent: Whether to pretty-print with two-space indentation.

    Returns:
        UTF-8 encoded JSON.
    """
    options = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(data, option=options)


def write_json_atomic(path: Path, data: object) -> None:
    """Write data as JSON atomically.

    Writes to a temporary file in the same directory, then replaces the
    target, so readers observe either the previous file or the new one.

    Args:
        path: Destination file path.
        data: JSON-compatible data.

    Raises:
        OSError: If the write or the replace fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    content = dump_json(data)

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.stem}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            _ = f.write(content)
            temp_path = Path(f.name)
        _ = temp_path.replace(path)
    except OSError:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise
