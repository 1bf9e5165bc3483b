import shutil
from pathlib import Path

import pytest

from reposync.cli import create_app
from reposync.enums import GitBackend

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(
    params=[
        pytest.param(GitBackend.DULWICH, id="dulwich"),
        pytest.param(GitBackend.CLI, id="cli", marks=requires_git),
    ]
)
def backend(request: pytest.FixtureRequest) -> GitBackend:
    """Every backend; the subprocess one only where git is installed."""
    return request.param  # pyright: ignore[reportAny]


def run_cli(*args: str) -> int:
    """Run the reposync CLI in-process and return its exit code."""
    app = create_app()
    try:
        app.meta(list(args))
    except SystemExit as e:
        return int(e.code or 0)  # pyright: ignore[reportArgumentType]
    return 0
