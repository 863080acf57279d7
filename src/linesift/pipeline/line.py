"""Line types flowing through filter pipelines.

A raw line is what the input source handed us. A matched line wraps any
line with the spans that matched the current query, leaving the wrapped
line untouched.
"""


from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

Span = tuple[int, int]
"""Half-open ``(start, end)`` character offsets into a display string."""

NUL_SEPARATOR = "\0"


@runtime_checkable
class Line(Protocol):
    """Anything that can be displayed, selected and emitted."""

    def display_string(self) -> str:
        """Text shown (and matched against)."""
        ...

    def output(self) -> str:
        """Text emitted when the line is selected."""
        ...

    def indices(self) -> list[Span]:
        """Highlighted spans, empty for unmatched lines."""
        ...


@dataclass(frozen=True, slots=True)
class RawLine:
    """A line as received from the source.

    With ``enable_sep`` the buffer is split on the first NUL: the part
    before it is displayed, the part after it is emitted on selection.
    """

    buf: str
    enable_sep: bool = False

    def _split(self) -> tuple[str, str] | None:
        if not self.enable_sep:
            return None
        display, sep, out = self.buf.partition(NUL_SEPARATOR)
        if not sep:
            return None
        return display, out

    def display_string(self) -> str:
        parts = self._split()
        return parts[0] if parts else self.buf

    def output(self) -> str:
        parts = self._split()
        return parts[1] if parts else self.buf

    def indices(self) -> list[Span]:
        return []


@dataclass(frozen=True, slots=True)
class MatchedLine:
    """A line plus the spans that matched the query."""

    line: Line
    matches: list[Span] = field(default_factory=list)

    def display_string(self) -> str:
        return self.line.display_string()

    def output(self) -> str:
        return self.line.output()

    def indices(self) -> list[Span]:
        return self.matches
