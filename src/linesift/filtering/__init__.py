"""Matching strategies and their registry.

Built-in strategies are regex based (Regexp, IgnoreCase, CaseSensitive,
SmartCase); custom strategies delegate to an external command.
"""

from linesift.filtering.external import QUERY_PLACEHOLDER, ExternalCmdFilter
from linesift.filtering.patterns import (
    DEFAULT_FLAGS,
    IGNORE_CASE_FLAGS,
    SMART_CASE_FLAGS,
    QueryFlags,
    RegexpFlags,
    StaticFlags,
    query_to_regexps,
)
from linesift.filtering.protocol import QueryFilterer
from linesift.filtering.regexp import (
    RegexpFilter,
    new_case_sensitive_filter,
    new_ignore_case_filter,
    new_regexp_filter,
    new_smart_case_filter,
)
from linesift.filtering.regions import dedupe_matches
from linesift.filtering.registry import FilterSet, build_filter_set

__all__ = [
    # Contract
    "QueryFilterer",
    # Regexp strategies
    "RegexpFilter",
    "new_regexp_filter",
    "new_ignore_case_filter",
    "new_case_sensitive_filter",
    "new_smart_case_filter",
    # Flags
    "RegexpFlags",
    "StaticFlags",
    "QueryFlags",
    "DEFAULT_FLAGS",
    "IGNORE_CASE_FLAGS",
    "SMART_CASE_FLAGS",
    "query_to_regexps",
    "dedupe_matches",
    # External
    "ExternalCmdFilter",
    "QUERY_PLACEHOLDER",
    # Registry
    "FilterSet",
    "build_filter_set",
]
