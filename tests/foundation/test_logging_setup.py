"""Tests for logging configuration."""

import io
import logging
import os
from pathlib import Path

import pytest

from linesift.foundation.logging import (
    MAX_SESSION_LOGS,
    configure_logging,
    prune_session_logs,
    session_log_dir,
)


def console_level() -> int:
    return logging.getLogger().handlers[0].level


class TestLevelResolution:
    def test_default_is_warning(self) -> None:
        configure_logging(stream=io.StringIO())
        assert console_level() == logging.WARNING

    def test_debug_flag(self) -> None:
        configure_logging(debug=True, stream=io.StringIO())
        assert console_level() == logging.DEBUG

    def test_env_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LINESIFT_LOG_LEVEL", "info")
        configure_logging(stream=io.StringIO())
        assert console_level() == logging.INFO

    def test_env_debug(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LINESIFT_DEBUG", "true")
        configure_logging(stream=io.StringIO())
        assert console_level() == logging.DEBUG

    def test_explicit_level_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LINESIFT_LOG_LEVEL", "DEBUG")
        configure_logging(level="ERROR", stream=io.StringIO())
        assert console_level() == logging.ERROR

    def test_unknown_level_falls_back(self) -> None:
        configure_logging(level="LOUD", stream=io.StringIO())
        assert console_level() == logging.WARNING


class TestOutput:
    def test_messages_reach_stream(self) -> None:
        stream = io.StringIO()
        configure_logging(stream=stream)
        logging.getLogger("linesift.test").warning("disk %s", "full")
        assert "linesift.test: disk full" in stream.getvalue()

    def test_no_session_log_by_default(self, tmp_path: Path) -> None:
        assert configure_logging(stream=io.StringIO()) is None
        assert len(logging.getLogger().handlers) == 1


class TestSessionLog:
    def test_written_under_project(self, tmp_path: Path) -> None:
        (tmp_path / ".linesift").mkdir()
        log_file = configure_logging(stream=io.StringIO(), persist=True)
        logging.getLogger("linesift.test").debug("kept on disk")

        for handler in logging.getLogger().handlers:
            handler.flush()
        assert log_file is not None
        assert log_file.parent == tmp_path / ".linesift" / "logs"
        assert "kept on disk" in log_file.read_text()

    def test_console_stays_quiet(self, tmp_path: Path) -> None:
        stream = io.StringIO()
        configure_logging(stream=stream, persist=True)
        logging.getLogger("linesift.test").debug("file only")
        assert "file only" not in stream.getvalue()

    def test_falls_back_to_home(self, tmp_path: Path) -> None:
        assert session_log_dir() == tmp_path / "home" / ".linesift" / "logs"
        assert session_log_dir().is_dir()

    def test_retention(self, tmp_path: Path) -> None:
        log_dir = tmp_path / "home" / ".linesift" / "logs"
        log_dir.mkdir(parents=True)
        for i in range(MAX_SESSION_LOGS + 3):
            (log_dir / f"session_{i:02d}.log").write_text("")

        configure_logging(stream=io.StringIO(), persist=True)
        assert len(list(log_dir.glob("session_*.log"))) == MAX_SESSION_LOGS

    def test_prune_keeps_newest(self, tmp_path: Path) -> None:
        for i in range(5):
            path = tmp_path / f"session_{i}.log"
            path.write_text("")
            os.utime(path, (1000 + i, 1000 + i))

        removed = prune_session_logs(tmp_path, keep=2)
        assert sorted(p.name for p in removed) == ["session_0.log", "session_1.log", "session_2.log"]
        assert sorted(p.name for p in tmp_path.glob("session_*.log")) == ["session_3.log", "session_4.log"]
