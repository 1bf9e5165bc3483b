"""Unit tests for logging utilities."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from reposync.utils import create_app_logger, create_null_logger

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem


@pytest.fixture(autouse=True)
def _no_debug_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("REPOSYNC_DEBUG", raising=False)


class TestCreateAppLogger:
    def test_writes_to_default_log_file(self, fs: FakeFilesystem) -> None:
        logger = create_app_logger(Path("/data"))

        logger.info("cache_hit", key="/src/a")

        content = Path("/data/logs/reposync.log").read_text()
        assert '"event": "cache_hit"' in content
        assert '"key": "/src/a"' in content

    def test_explicit_log_file(self, fs: FakeFilesystem) -> None:
        logger = create_app_logger(Path("/data"), log_file="/var/log/custom.log")

        logger.info("refresh_completed")

        assert "refresh_completed" in Path("/var/log/custom.log").read_text()

    def test_text_format(self, fs: FakeFilesystem) -> None:
        logger = create_app_logger(Path("/data"), log_format="text")

        logger.info("refresh_completed", identity="/src/a")

        content = Path("/data/logs/reposync.log").read_text()
        assert "refresh_completed" in content
        assert "identity=/src/a" in content

    def test_level_filters_events(self, fs: FakeFilesystem) -> None:
        logger = create_app_logger(Path("/data"), level="warning")

        logger.info("ignored")
        logger.warning("kept")

        content = Path("/data/logs/reposync.log").read_text()
        assert "ignored" not in content
        assert "kept" in content

    def test_debug_env_overrides_level(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("REPOSYNC_DEBUG", "1")
        logger = create_app_logger(Path("/data"), level="error")

        logger.debug("git_command")

        assert "git_command" in Path("/data/logs/reposync.log").read_text()

    def test_rotation_uses_stdlib_handler(self, fs: FakeFilesystem) -> None:
        logger = create_app_logger(Path("/data"), max_bytes=1024, backup_count=2)

        logger.info("rotated_event")

        stdlib_logger = logger._logger  # pyright: ignore[reportAttributeAccessIssue, reportPrivateUsage]  # noqa: SLF001
        assert isinstance(stdlib_logger, logging.Logger)
        handler = stdlib_logger.handlers[0]
        handler.flush()
        assert "rotated_event" in Path("/data/logs/reposync.log").read_text()


class TestCreateNullLogger:
    def test_discards_events(self) -> None:
        logger = create_null_logger()

        logger.info("anything", key="value")
        logger.error("still_nothing")
