"""Configuration management for linesift."""

from linesift.foundation.config.loader import (
    get_config,
    load_config,
    reset_config,
)
from linesift.foundation.types.config import CustomMatcherConfig, LinesiftConfig

__all__ = [
    "CustomMatcherConfig",
    "LinesiftConfig",
    "get_config",
    "load_config",
    "reset_config",
]
