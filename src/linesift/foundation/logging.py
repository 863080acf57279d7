"""Logging setup for the linesift CLI.

The terminal belongs to the results, so the console handler stays at
WARNING unless asked otherwise. The console level comes from, first match
wins: the ``level`` argument, ``LINESIFT_LOG_LEVEL``, ``LINESIFT_DEBUG``,
the ``--debug`` flag.

With ``persist`` every record, DEBUG included, also goes to a per-session
file under ``.linesift/logs/``. Only the newest ``MAX_SESSION_LOGS`` files
are kept.

Usage:
    from linesift.foundation.logging import configure_logging
    configure_logging(debug=debug, persist=persist_log)
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

CONSOLE_FORMAT = "%(name)s: %(message)s"
DETAILED_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"
MAX_SESSION_LOGS = 10

_TRUTHY = frozenset({"1", "true", "yes"})

logger = logging.getLogger(__name__)


def resolve_level(debug: bool = False, level: int | str | None = None) -> int:
    """Effective console level."""
    if level is None:
        level = os.environ.get("LINESIFT_LOG_LEVEL") or None
    if level is not None:
        return _to_level(level)
    if debug or os.environ.get("LINESIFT_DEBUG", "").lower() in _TRUTHY:
        return logging.DEBUG
    return logging.WARNING


def _to_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    if level.isdigit():
        return int(level)
    return logging.getLevelNamesMapping().get(level.upper(), logging.WARNING)


def session_log_dir(base: Path | None = None) -> Path:
    """``.linesift/logs`` of the project, or of the home directory when the
    project has no ``.linesift`` directory. Created if missing.
    """
    root = base or Path.cwd()
    if not (root / ".linesift").is_dir():
        root = Path.home()
    log_dir = root / ".linesift" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def prune_session_logs(log_dir: Path, keep: int = MAX_SESSION_LOGS) -> list[Path]:
    """Delete all but the ``keep`` newest session logs.

    Returns:
        The removed files.
    """
    logs = sorted(log_dir.glob("session_*.log"), key=lambda p: p.stat().st_mtime)
    stale = logs[: max(len(logs) - keep, 0)]
    for path in stale:
        path.unlink(missing_ok=True)
    return stale


def _session_handler() -> logging.FileHandler | None:
    try:
        log_dir = session_log_dir()
        # Leave room for the file about to be created
        prune_session_logs(log_dir, keep=MAX_SESSION_LOGS - 1)
        path = log_dir / f"session_{datetime.now():%Y-%m-%d_%H-%M-%S}.log"
        handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    except OSError as e:
        sys.stderr.write(f"linesift: session log disabled: {e}\n")
        return None

    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(DETAILED_FORMAT))
    return handler


def configure_logging(
    *,
    debug: bool = False,
    level: int | str | None = None,
    stream: TextIO | None = None,
    persist: bool = False,
) -> Path | None:
    """Install the console handler, plus a session file handler with ``persist``.

    Replaces any handlers already on the root logger.

    Returns:
        Path of the session log, or None when nothing is written to disk.
    """
    console_level = resolve_level(debug, level)
    console = logging.StreamHandler(stream or sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(
        logging.Formatter(DETAILED_FORMAT if console_level <= logging.DEBUG else CONSOLE_FORMAT)
    )

    session = _session_handler() if persist else None

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    if session is not None:
        root.addHandler(session)
    root.setLevel(logging.DEBUG if session is not None else console_level)

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logger.debug(
        "Logging configured: console=%s, session=%s",
        logging.getLevelName(console_level),
        session.baseFilename if session is not None else None,
    )
    return Path(session.baseFilename) if session is not None else None
