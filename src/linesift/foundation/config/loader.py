"""linesift configuration management.

Loads configuration from .linesift/config.yaml with sensible defaults.
A few settings can be overridden via environment variables (LINESIFT_*).

Config locations (in priority order):
1. Explicit path passed to load_config()
2. .linesift/config.yaml (project-local)
3. ~/.linesift/config.yaml (user-global)
4. Built-in defaults

Example config.yaml:

    matcher: SmartCase
    sticky_selection: true
    custom_matcher:
      migemo: [migemogrep, $QUERY]
      fzf:
        cmd: fzf
        args: [--filter, $QUERY]
        buffer_threshold: 500
"""


import logging
import os
import threading
from pathlib import Path
from typing import Any

import yaml

from linesift.foundation.errors import config_error
from linesift.foundation.types.config import (
    DEFAULT_BUFFER_THRESHOLD,
    IGNORE_CASE_MATCH,
    CustomMatcherConfig,
    LinesiftConfig,
)

logger = logging.getLogger(__name__)

# Global config instance (lazy-loaded, thread-safe)
_config: LinesiftConfig | None = None
_config_lock = threading.Lock()

_ENV_PREFIX = "LINESIFT_"
_ENV_KEYS = ("matcher", "sticky_selection", "enable_sep")


def _default_paths() -> list[Path]:
    return [
        Path(".linesift/config.yaml"),
        Path.home() / ".linesift" / "config.yaml",
    ]


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false", "yes", "no", "1", "0"):
        return value.lower() in ("true", "yes", "1")
    raise config_error(key, f"expected a boolean, got {value!r}")


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply LINESIFT_MATCHER, LINESIFT_STICKY_SELECTION and LINESIFT_ENABLE_SEP."""
    for key in _ENV_KEYS:
        value = os.environ.get(_ENV_PREFIX + key.upper())
        if value is None:
            continue
        config_dict[key] = value
    return config_dict


def _parse_custom_matcher(name: str, entry: Any) -> CustomMatcherConfig:
    """Parse one custom matcher entry.

    Accepts either the list form ``[cmd, arg, ...]`` or a mapping with
    ``cmd``, ``args`` and ``buffer_threshold``.
    """
    key = f"custom_matcher.{name}"
    if isinstance(entry, list):
        if not entry:
            raise config_error(key, "command list is empty")
        cmd, *args = (str(part) for part in entry)
        return CustomMatcherConfig(name=name, cmd=cmd, args=tuple(args))

    if not isinstance(entry, dict):
        raise config_error(key, f"expected a list or mapping, got {type(entry).__name__}")

    threshold = entry.get("buffer_threshold", DEFAULT_BUFFER_THRESHOLD)
    if not isinstance(threshold, int) or isinstance(threshold, bool) or threshold < 1:
        raise config_error(f"{key}.buffer_threshold", f"expected a positive integer, got {threshold!r}")

    args = entry.get("args") or []
    if not isinstance(args, list):
        raise config_error(f"{key}.args", "expected a list")

    return CustomMatcherConfig(
        name=name,
        cmd=str(entry.get("cmd") or ""),
        args=tuple(str(a) for a in args),
        buffer_threshold=threshold,
    )


def _dict_to_config(data: dict[str, Any]) -> LinesiftConfig:
    """Convert a dict to LinesiftConfig."""
    custom = data.get("custom_matcher") or {}
    if not isinstance(custom, dict):
        raise config_error("custom_matcher", "expected a mapping of name to command")

    return LinesiftConfig(
        matcher=str(data.get("matcher", IGNORE_CASE_MATCH)),
        sticky_selection=_coerce_bool("sticky_selection", data.get("sticky_selection", False)),
        enable_sep=_coerce_bool("enable_sep", data.get("enable_sep", False)),
        custom_matchers=tuple(
            _parse_custom_matcher(str(name), entry) for name, entry in custom.items()
        ),
    )


def load_config(path: str | Path | None = None) -> LinesiftConfig:
    """Load configuration from file with defaults and env overrides.

    Args:
        path: Optional explicit config file path.

    Returns:
        Merged LinesiftConfig instance.

    Raises:
        LinesiftError: If the first config file found is not valid.
    """
    global _config

    config_dict: dict[str, Any] = {}

    config_paths = []
    if path:
        config_paths.append(Path(path))
    config_paths.extend(_default_paths())

    for config_path in config_paths:
        if not config_path.exists():
            continue
        try:
            with open(config_path) as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise config_error(str(config_path), "not valid YAML", cause=e) from e
        if not isinstance(file_config, dict):
            raise config_error(str(config_path), "top level must be a mapping")
        logger.debug("Loaded config from %s", config_path)
        config_dict.update(file_config)
        break  # Use first found config

    config_dict = _apply_env_overrides(config_dict)

    _config = _dict_to_config(config_dict)
    return _config


def get_config() -> LinesiftConfig:
    """Get the current configuration, loading if needed."""
    global _config

    if _config is not None:
        return _config

    with _config_lock:
        if _config is None:
            _config = load_config()
        return _config


def reset_config() -> None:
    """Reset the global config (useful for testing)."""
    global _config
    with _config_lock:
        _config = None
