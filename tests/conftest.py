"""Pytest fixtures for linesift tests."""

import logging
import sys
from collections.abc import Iterator

import pytest

from linesift.foundation.config import reset_config
from linesift.pipeline.buffer import LineBuffer
from linesift.pipeline.line import Line, RawLine


def raw_lines(*texts: str) -> list[Line]:
    return [RawLine(t) for t in texts]


@pytest.fixture
def sample_lines() -> list[Line]:
    """A small mixed-case source."""
    return raw_lines(
        "alpha beta gamma",
        "FooBar",
        "foobar baz",
        "nothing here",
        "Error: disk full",
        "error: timeout",
    )


@pytest.fixture
def source(sample_lines: list[Line]) -> LineBuffer:
    return LineBuffer(sample_lines)


@pytest.fixture
def python_cmd() -> str:
    """Interpreter used as a portable external matcher."""
    return sys.executable


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Keep tests away from real config files and LINESIFT_* variables."""
    for key in ("LINESIFT_MATCHER", "LINESIFT_STICKY_SELECTION", "LINESIFT_ENABLE_SEP",
                "LINESIFT_LOG_LEVEL", "LINESIFT_DEBUG"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    """Undo configure_logging() calls made by the code under test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
