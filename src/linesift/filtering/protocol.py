"""The contract every matching strategy implements."""


from typing import Protocol, Self, runtime_checkable

from linesift.pipeline.core import Pipeline, Pipeliner


@runtime_checkable
class QueryFilterer(Protocol):
    """A matching strategy that can be placed into a pipeline.

    Registered instances only carry configuration. Each pass works on a
    ``clone()``, so pipeline wiring is never shared between passes.
    """

    @property
    def name(self) -> str:
        """Name used in config files and the matcher list."""
        ...

    def set_query(self, query: str) -> None:
        """Set the query for the next ``accept``."""
        ...

    def accept(self, upstream: Pipeliner) -> None:
        """Start filtering the lines ``upstream`` produces."""
        ...

    def pipeline(self) -> Pipeline:
        """Output side of an accepted pass."""
        ...

    def clone(self) -> Self:
        """Copy configuration and query, without pipeline state."""
        ...
