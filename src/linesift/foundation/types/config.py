"""Configuration type definitions - single source of truth for all config classes."""


from dataclasses import dataclass, field

DEFAULT_BUFFER_THRESHOLD = 100
"""Lines handed to a custom matcher per process invocation."""

# These are used as keys in the config file
IGNORE_CASE_MATCH = "IgnoreCase"
CASE_SENSITIVE_MATCH = "CaseSensitive"
SMART_CASE_MATCH = "SmartCase"
REGEXP_MATCH = "Regexp"

BUILTIN_MATCHERS: tuple[str, ...] = (
    IGNORE_CASE_MATCH,
    CASE_SENSITIVE_MATCH,
    SMART_CASE_MATCH,
    REGEXP_MATCH,
)


@dataclass(frozen=True, slots=True)
class CustomMatcherConfig:
    """An external command used as a matcher."""

    name: str
    """Name shown in the matcher list and used with --matcher."""

    cmd: str
    """Executable, resolved on PATH."""

    args: tuple[str, ...] = ()
    """Arguments; every "$QUERY" is replaced with the live query."""

    buffer_threshold: int = DEFAULT_BUFFER_THRESHOLD
    """Lines per batch written to the process' stdin."""


@dataclass(frozen=True, slots=True)
class LinesiftConfig:
    """Root configuration for linesift."""

    matcher: str = IGNORE_CASE_MATCH
    """Name of the matcher active at startup."""

    sticky_selection: bool = False
    """Keep the current selection when a new query runs."""

    enable_sep: bool = False
    """Split lines on NUL into display and output parts."""

    custom_matchers: tuple[CustomMatcherConfig, ...] = field(default_factory=tuple)
    """External command matchers, in config order."""
