"""Regular expression matching strategies.

One ``RegexpFilter`` class covers all four built-in matchers; they only
differ in their flag strategy and whether terms are escaped first:

    Regexp         no flags,           terms are regexes
    IgnoreCase     always (?i),        terms are literal
    CaseSensitive  no flags,           terms are literal
    SmartCase      (?i) unless upper,  terms are literal
"""


import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from linesift.filtering.patterns import (
    DEFAULT_FLAGS,
    IGNORE_CASE_FLAGS,
    SMART_CASE_FLAGS,
    RegexpFlags,
    query_to_regexps,
)
from linesift.filtering.regions import dedupe_matches
from linesift.foundation.errors import runtime_error
from linesift.foundation.types.config import (
    CASE_SENSITIVE_MATCH,
    IGNORE_CASE_MATCH,
    REGEXP_MATCH,
    SMART_CASE_MATCH,
)
from linesift.pipeline.channel import LineChannel
from linesift.pipeline.core import (
    FilterDidNotMatch,
    Pipeline,
    Pipeliner,
    accept_pipeline,
    spawn,
)
from linesift.pipeline.line import Line, MatchedLine, Span

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class RegexpFilter:
    """Keeps lines that match every term of the query."""

    name: str
    flags: RegexpFlags = DEFAULT_FLAGS
    quotemeta: bool = False
    query: str = ""

    _compiled: list[re.Pattern[str]] | None = field(default=None, init=False, repr=False)
    _pipeline: Pipeline | None = field(default=None, init=False, repr=False)
    _task: asyncio.Task[Any] | None = field(default=None, init=False, repr=False)

    def set_query(self, query: str) -> None:
        self.query = query
        self._compiled = None

    def compiled_query(self) -> list[re.Pattern[str]]:
        """Compiled terms, cached until the query changes.

        Raises:
            PatternCompileError: If a term is not a valid pattern.
        """
        if self._compiled is None:
            self._compiled = query_to_regexps(self.flags, self.quotemeta, self.query)
        return self._compiled

    def filter_line(self, line: Line) -> MatchedLine:
        """Match one line against all terms.

        Raises:
            FilterDidNotMatch: If any term has no match in the line.
        """
        text = line.display_string()
        matches: list[Span] = []
        for rx in self.compiled_query():
            found = [m.span() for m in rx.finditer(text)]
            if not found:
                raise FilterDidNotMatch
            matches.extend(found)

        return MatchedLine(line, dedupe_matches(matches))

    def accept(self, upstream: Pipeliner) -> None:
        """Start the pass.

        The query is compiled before anything is started, so an invalid
        query raises here instead of silently matching nothing.
        """
        self.compiled_query()
        logger.debug("Running %s filter using query %r", self.name, self.query)

        source = upstream.pipeline()
        output = LineChannel()
        self._pipeline = Pipeline(source.cancel, output)
        self._task = spawn(
            accept_pipeline(source, output, self.filter_line),
            name=f"filter-{self.name}",
        )

    def pipeline(self) -> Pipeline:
        if self._pipeline is None:
            raise runtime_error(f"filter '{self.name}' has not accepted a source")
        return self._pipeline

    async def wait_done(self) -> None:
        if self._task is not None:
            await self._task

    def clone(self) -> "RegexpFilter":
        return RegexpFilter(
            name=self.name,
            flags=self.flags,
            quotemeta=self.quotemeta,
            query=self.query,
        )

    def __str__(self) -> str:
        return self.name


def new_regexp_filter() -> RegexpFilter:
    return RegexpFilter(name=REGEXP_MATCH, flags=DEFAULT_FLAGS)


def new_ignore_case_filter() -> RegexpFilter:
    return RegexpFilter(name=IGNORE_CASE_MATCH, flags=IGNORE_CASE_FLAGS, quotemeta=True)


def new_case_sensitive_filter() -> RegexpFilter:
    return RegexpFilter(name=CASE_SENSITIVE_MATCH, flags=DEFAULT_FLAGS, quotemeta=True)


def new_smart_case_filter() -> RegexpFilter:
    """Ignore case unless the query contains an upper-case character."""
    return RegexpFilter(name=SMART_CASE_MATCH, flags=SMART_CASE_FLAGS, quotemeta=True)
