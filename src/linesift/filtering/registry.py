"""FilterSet - the ordered, rotatable set of matching strategies.

Strategies keep their registration order. Exactly one is current; the UI
cycles through them with ``rotate()`` or picks one by name.
"""


import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from linesift.filtering.external import ExternalCmdFilter
from linesift.filtering.protocol import QueryFilterer
from linesift.filtering.regexp import (
    new_case_sensitive_filter,
    new_ignore_case_filter,
    new_regexp_filter,
    new_smart_case_filter,
)
from linesift.foundation.errors import (
    ErrorCode,
    ExternalCommandError,
    FilterNotFoundError,
    LinesiftError,
)
from linesift.foundation.types.config import LinesiftConfig

logger = logging.getLogger(__name__)


@dataclass
class FilterSet:
    """Registered strategies plus the index of the current one.

    Mutated only between passes, so no locking is needed.
    """

    filters: list[QueryFilterer] = field(default_factory=list)
    current_index: int = 0

    def __len__(self) -> int:
        return len(self.filters)

    def __iter__(self) -> Iterator[QueryFilterer]:
        return iter(self.filters)

    def size(self) -> int:
        return len(self.filters)

    def names(self) -> list[str]:
        return [f.name for f in self.filters]

    def add(self, qf: QueryFilterer) -> None:
        self.filters.append(qf)

    def reset(self) -> None:
        self.current_index = 0

    def rotate(self) -> None:
        """Make the next strategy current, wrapping around at the end."""
        if not self.filters:
            return
        self.current_index = (self.current_index + 1) % len(self.filters)
        logger.debug("FilterSet.rotate: now filter in effect is %s", self.filters[self.current_index])

    def set_current_by_name(self, name: str) -> None:
        """Make the strategy called ``name`` current.

        Raises:
            FilterNotFoundError: If no strategy has that name.
        """
        for i, f in enumerate(self.filters):
            if f.name == name:
                self.current_index = i
                return
        raise FilterNotFoundError(name)

    def current(self) -> QueryFilterer:
        """The active strategy.

        Raises:
            LinesiftError: If nothing is registered.
        """
        if not self.filters:
            raise LinesiftError(ErrorCode.FILTER_SET_EMPTY)
        return self.filters[self.current_index]


def build_filter_set(config: LinesiftConfig) -> FilterSet:
    """Register the built-in matchers and every usable custom matcher.

    Custom matchers whose executable cannot be found are logged and left
    out, so they can never be selected.
    """
    filters = FilterSet()
    filters.add(new_ignore_case_filter())
    filters.add(new_case_sensitive_filter())
    filters.add(new_smart_case_filter())
    filters.add(new_regexp_filter())

    for matcher in config.custom_matchers:
        ecf = ExternalCmdFilter.from_config(matcher, enable_sep=config.enable_sep)
        try:
            ecf.verify()
        except ExternalCommandError as e:
            logger.warning("Skipping custom matcher %s: %s", matcher.name, e.message)
            continue
        filters.add(ecf)

    try:
        filters.set_current_by_name(config.matcher)
    except FilterNotFoundError:
        logger.warning("Unknown matcher %r, using %s", config.matcher, filters.current().name)
    return filters
