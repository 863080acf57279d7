"""Query to pattern compilation.

A query is split on spaces into terms; every term becomes one compiled
pattern and a line has to match all of them. Which regex flags a term
gets is decided by a flag strategy: either a fixed set, or a function of
the whole query (smart case).
"""


import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from linesift.foundation.errors import PatternCompileError

IGNORE_CASE = "i"


class RegexpFlags(Protocol):
    """Derives inline regex flags for a query."""

    def flags(self, query: str) -> tuple[str, ...]: ...


@dataclass(frozen=True, slots=True)
class StaticFlags:
    """The same flags for every query."""

    values: tuple[str, ...] = ()

    def flags(self, query: str) -> tuple[str, ...]:
        return self.values


@dataclass(frozen=True, slots=True)
class QueryFlags:
    """Flags computed from the query text."""

    func: Callable[[str], tuple[str, ...]]

    def flags(self, query: str) -> tuple[str, ...]:
        return self.func(query)


def contains_upper(query: str) -> bool:
    return any(c.isupper() for c in query)


def smart_case_flags(query: str) -> tuple[str, ...]:
    """Case-sensitive as soon as the query has an upper-case letter."""
    if contains_upper(query):
        return ()
    return (IGNORE_CASE,)


DEFAULT_FLAGS = StaticFlags(())
IGNORE_CASE_FLAGS = StaticFlags((IGNORE_CASE,))
SMART_CASE_FLAGS = QueryFlags(smart_case_flags)


def regexp_for(term: str, flags: tuple[str, ...], quotemeta: bool) -> re.Pattern[str]:
    """Compile a single term.

    Raises:
        PatternCompileError: If the term is not a valid regular expression.
    """
    text = re.escape(term) if quotemeta else term
    if flags:
        text = f"(?{''.join(flags)}){text}"

    try:
        return re.compile(text)
    except re.error as e:
        raise PatternCompileError(term, cause=e) from e


def query_to_regexps(flags: RegexpFlags, quotemeta: bool, query: str) -> list[re.Pattern[str]]:
    """Compile every space separated term of ``query``.

    Flags are derived from the whole query, not per term, so ``"foo Bar"``
    is case-sensitive in both terms under smart case. Runs of spaces do not
    produce empty terms.
    """
    query_flags = flags.flags(query)
    return [
        regexp_for(term, query_flags, quotemeta)
        for term in query.strip().split(" ")
        if term
    ]
