"""linesift Error System.

Provides structured error handling with:
- Numeric error codes for programmatic handling
- User-friendly messages
- Recovery hints shown next to the status line
- Context for debugging

A line that simply fails to match is never an error; see
``linesift.pipeline.core.FilterDidNotMatch`` for that sentinel.
"""


from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Numeric error codes organized by category.

    Format: XYYY where X = category, YYY = specific error

    Categories:
        1xxx - Query errors
        2xxx - Filter selection errors
        3xxx - External command errors
        5xxx - Configuration errors
        6xxx - Runtime errors
    """

    # 1xxx - Query Errors
    QUERY_INVALID_PATTERN = 1001

    # 2xxx - Filter Errors
    FILTER_NOT_FOUND = 2001
    FILTER_SET_EMPTY = 2002

    # 3xxx - External Command Errors
    EXTERNAL_CMD_UNSPECIFIED = 3001
    EXTERNAL_CMD_NOT_FOUND = 3002

    # 5xxx - Configuration Errors
    CONFIG_INVALID = 5002

    # 6xxx - Runtime Errors
    RUNTIME_STATE_INVALID = 6001

    @property
    def category(self) -> str:
        """Get the error category name."""
        prefix = self.value // 1000
        return {
            1: "query",
            2: "filter",
            3: "external",
            5: "config",
            6: "runtime",
        }.get(prefix, "unknown")

    @property
    def is_recoverable(self) -> bool:
        """Whether this error type is typically recoverable."""
        non_recoverable = {
            ErrorCode.EXTERNAL_CMD_UNSPECIFIED,
            ErrorCode.EXTERNAL_CMD_NOT_FOUND,
            ErrorCode.CONFIG_INVALID,
        }
        return self not in non_recoverable


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    # Query errors
    ErrorCode.QUERY_INVALID_PATTERN: "Invalid pattern '{term}': {detail}",

    # Filter errors
    ErrorCode.FILTER_NOT_FOUND: "Filter '{name}' was not found.",
    ErrorCode.FILTER_SET_EMPTY: "No filters are registered.",

    # External command errors
    ErrorCode.EXTERNAL_CMD_UNSPECIFIED: "No executable specified for custom matcher '{name}'.",
    ErrorCode.EXTERNAL_CMD_NOT_FOUND: "Executable '{cmd}' for custom matcher '{name}' not found in PATH.",

    # Config errors
    ErrorCode.CONFIG_INVALID: "Invalid configuration for '{key}': {detail}",

    # Runtime errors
    ErrorCode.RUNTIME_STATE_INVALID: "Invalid runtime state: {detail}",
}


RECOVERY_HINTS: dict[ErrorCode, list[str]] = {
    ErrorCode.QUERY_INVALID_PATTERN: [
        "Keep typing, the query is re-evaluated on every change",
        "Switch to a literal matcher (IgnoreCase, CaseSensitive, SmartCase)",
    ],
    ErrorCode.FILTER_NOT_FOUND: [
        "Use 'linesift matchers' to see available filters",
    ],
    ErrorCode.EXTERNAL_CMD_NOT_FOUND: [
        "Install '{cmd}' or add its directory to PATH",
        "Remove the custom matcher '{name}' from your config",
    ],
    ErrorCode.CONFIG_INVALID: [
        "Check .linesift/config.yaml for typos",
    ],
}


class LinesiftError(Exception):
    """Base error type for all linesift errors.

    Example:
        >>> err = LinesiftError(
        ...     code=ErrorCode.FILTER_NOT_FOUND,
        ...     context={"name": "Fuzzy"},
        ... )
        >>> print(err)
        [LS-2001] Filter 'Fuzzy' was not found.
    """

    def __init__(
        self,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.cause = cause
        super().__init__(str(self))

    @property
    def message(self) -> str:
        """Get the formatted user-friendly message."""
        template = ERROR_MESSAGES.get(self.code, "An error occurred: {detail}")
        try:
            return template.format(**self.context)
        except KeyError:
            return template

    @property
    def recovery_hints(self) -> list[str]:
        """Get recovery suggestions for this error."""
        formatted = []
        for hint in RECOVERY_HINTS.get(self.code, []):
            try:
                formatted.append(hint.format(**self.context))
            except KeyError:
                formatted.append(hint)
        return formatted

    @property
    def is_recoverable(self) -> bool:
        """Whether this error is typically recoverable."""
        return self.code.is_recoverable

    @property
    def category(self) -> str:
        """Get the error category."""
        return self.code.category

    @property
    def error_id(self) -> str:
        """Get the error ID string (e.g., 'LS-1001')."""
        return f"LS-{self.code.value}"

    def __str__(self) -> str:
        return f"[{self.error_id}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, context={self.context!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for logging/JSON output."""
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "category": self.category,
            "message": self.message,
            "recoverable": self.is_recoverable,
            "recovery_hints": self.recovery_hints,
            "context": self.context,
        }


class PatternCompileError(LinesiftError):
    """A query term could not be compiled as a regular expression."""

    def __init__(self, term: str, cause: Exception | None = None):
        super().__init__(
            ErrorCode.QUERY_INVALID_PATTERN,
            context={"term": term, "detail": str(cause) if cause else "unknown"},
            cause=cause,
        )
        self.term = term


class FilterNotFoundError(LinesiftError):
    """No registered filter has the requested name."""

    def __init__(self, name: str):
        super().__init__(ErrorCode.FILTER_NOT_FOUND, context={"name": name})
        self.name = name


class ExternalCommandError(LinesiftError):
    """An external command matcher cannot be activated."""


# =============================================================================
# Convenience constructors
# =============================================================================


def config_error(key: str, detail: str, cause: Exception | None = None) -> LinesiftError:
    """Create a configuration error."""
    return LinesiftError(
        code=ErrorCode.CONFIG_INVALID,
        context={"key": key, "detail": detail},
        cause=cause,
    )


def external_cmd_error(name: str, cmd: str) -> ExternalCommandError:
    """Create the verification error for a custom matcher."""
    if not cmd:
        return ExternalCommandError(ErrorCode.EXTERNAL_CMD_UNSPECIFIED, context={"name": name})
    return ExternalCommandError(
        ErrorCode.EXTERNAL_CMD_NOT_FOUND,
        context={"name": name, "cmd": cmd},
    )


def runtime_error(detail: str) -> LinesiftError:
    """Create an invalid-state error."""
    return LinesiftError(code=ErrorCode.RUNTIME_STATE_INVALID, context={"detail": detail})
