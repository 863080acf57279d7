"""In-memory line buffer.

Serves both ends of a pass: as a source it replays its lines from the
start into a fresh channel, as a sink it collects whatever a filter
produces. Every pass collects into its own buffer, so a cancelled pass
can never write into the result set of the pass that replaced it.
"""


import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from linesift.pipeline.channel import CancelToken, LineChannel
from linesift.pipeline.core import Pipeline, Pipeliner, spawn
from linesift.pipeline.line import Line

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BufferReplay:
    """A replay of a buffer bound to one pass' cancel token."""

    buffer: "LineBuffer"
    cancel: CancelToken

    def pipeline(self) -> Pipeline:
        return self.buffer.pipeline(self.cancel)


class LineBuffer:
    """Ordered collection of lines that can be replayed and filled."""

    def __init__(
        self,
        lines: Iterable[Line] | None = None,
        *,
        on_end: Callable[[], None] | None = None,
    ) -> None:
        self._lines: list[Line] = list(lines or [])
        self.on_end = on_end
        self._task: asyncio.Task[Any] | None = None

    def __len__(self) -> int:
        return len(self._lines)

    def size(self) -> int:
        return len(self._lines)

    def append(self, line: Line) -> None:
        self._lines.append(line)

    def extend(self, lines: Iterable[Line]) -> None:
        self._lines.extend(lines)

    def lines(self) -> list[Line]:
        """Snapshot of the current lines."""
        return list(self._lines)

    def line_at(self, index: int) -> Line:
        return self._lines[index]

    # -- source side ---------------------------------------------------------

    def replay(self, cancel: CancelToken) -> BufferReplay:
        """Bind a replay of this buffer to ``cancel``."""
        return BufferReplay(self, cancel)

    def pipeline(self, cancel: CancelToken | None = None) -> Pipeline:
        """Start replaying from the first line.

        The replay works on a snapshot, so lines appended meanwhile are
        left for the next pass and the buffer itself is never mutated.
        """
        token = cancel if cancel is not None else CancelToken()
        channel = LineChannel()
        spawn(self._replay(self.lines(), token, channel), name="linebuffer-replay")
        return Pipeline(token, channel)

    @staticmethod
    async def _replay(snapshot: list[Line], cancel: CancelToken, channel: LineChannel) -> None:
        try:
            for line in snapshot:
                if not await channel.send(line, cancel):
                    logger.debug("Replay cancelled")
                    return
        finally:
            channel.close()

    # -- sink side -----------------------------------------------------------

    def accept(self, upstream: Pipeliner) -> None:
        """Collect every line ``upstream`` produces, then call ``on_end``."""
        self._task = spawn(self._collect(upstream.pipeline()), name="linebuffer-collect")

    async def _collect(self, source: Pipeline) -> None:
        try:
            async for line in source.channel.iterate(source.cancel):
                self._lines.append(line)
        finally:
            if self.on_end is not None:
                self.on_end()

    @property
    def done(self) -> bool:
        """Whether collection finished (always True for a pure source)."""
        return self._task is None or self._task.done()

    async def wait_done(self) -> None:
        """Wait until the upstream pass has been fully collected."""
        if self._task is not None:
            await self._task
