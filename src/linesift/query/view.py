"""Minimal result view and selection state for non-interactive front-ends."""


import logging
from dataclasses import dataclass, field

from linesift.pipeline.buffer import LineBuffer

logger = logging.getLogger(__name__)


class ActiveLineView:
    """Tracks which buffer is on screen.

    Starts out showing the unfiltered source; every pass swaps in its own
    freshly allocated buffer.
    """

    def __init__(self, source: LineBuffer) -> None:
        self.source = source
        self.active = source

    def set_active_line_buffer(self, buf: LineBuffer) -> None:
        self.active = buf

    def reset_active_line_buffer(self) -> None:
        self.active = self.source

    @property
    def is_filtered(self) -> bool:
        return self.active is not self.source


@dataclass
class Selection:
    """Indices of selected lines in the active buffer."""

    indices: set[int] = field(default_factory=set)

    def add(self, index: int) -> None:
        self.indices.add(index)

    def clear(self) -> None:
        if self.indices:
            logger.debug("Clearing %d selected lines", len(self.indices))
        self.indices.clear()

    def __len__(self) -> int:
        return len(self.indices)
