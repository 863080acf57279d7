"""linesift - incremental line filtering.

Filters a stream of lines against a query that changes keystroke by
keystroke. Matching strategies are pluggable (regex variants or an
external command), every query change cancels the pass still running for
the previous one, and matched lines carry the spans to highlight.
"""

__version__ = "0.1.0"

from linesift.foundation.errors import (
    ErrorCode,
    ExternalCommandError,
    FilterNotFoundError,
    LinesiftError,
    PatternCompileError,
)
from linesift.filtering import (
    ExternalCmdFilter,
    FilterSet,
    QueryFilterer,
    RegexpFilter,
    build_filter_set,
    new_case_sensitive_filter,
    new_ignore_case_filter,
    new_regexp_filter,
    new_smart_case_filter,
)
from linesift.pipeline import CancelToken, LineBuffer, LineChannel, MatchedLine, RawLine
from linesift.query import QueryHub, QueryOrchestrator, QueryRequest

__all__ = [
    # Errors
    "ErrorCode",
    "LinesiftError",
    "PatternCompileError",
    "FilterNotFoundError",
    "ExternalCommandError",
    # Strategies
    "QueryFilterer",
    "RegexpFilter",
    "ExternalCmdFilter",
    "new_regexp_filter",
    "new_ignore_case_filter",
    "new_case_sensitive_filter",
    "new_smart_case_filter",
    "FilterSet",
    "build_filter_set",
    # Pipeline
    "RawLine",
    "MatchedLine",
    "LineBuffer",
    "LineChannel",
    "CancelToken",
    # Query
    "QueryHub",
    "QueryRequest",
    "QueryOrchestrator",
]
