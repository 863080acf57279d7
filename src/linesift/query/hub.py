"""Query hub - ferries queries and status messages between UI and engine.

The UI pushes one ``QueryRequest`` per keystroke; the orchestrator
acknowledges each with ``done()``. Status text flows the other way.
"""


import asyncio
import logging
from collections import deque
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from linesift.pipeline.buffer import LineBuffer

logger = logging.getLogger(__name__)


class StatusSink(Protocol):
    """Receives transient status text; "" clears it."""

    def send_status(self, message: str) -> None: ...


class SelectionControl(Protocol):
    """Clears the UI selection."""

    def clear(self) -> None: ...


class ResultView(Protocol):
    """Holds the result set currently on screen."""

    def set_active_line_buffer(self, buf: "LineBuffer") -> None: ...

    def reset_active_line_buffer(self) -> None: ...


class QueryRequest:
    """One query value plus its one-shot acknowledgement."""

    __slots__ = ("query", "_done")

    def __init__(self, query: str) -> None:
        self.query = query
        self._done = asyncio.Event()

    @property
    def is_done(self) -> bool:
        return self._done.is_set()

    def done(self) -> None:
        """Acknowledge the request.

        Raises:
            RuntimeError: If already acknowledged.
        """
        if self._done.is_set():
            raise RuntimeError(f"query request {self.query!r} acknowledged twice")
        self._done.set()

    async def wait(self) -> None:
        await self._done.wait()

    def __repr__(self) -> str:
        return f"QueryRequest(query={self.query!r}, done={self.is_done})"


class QueryHub:
    """In-process hub: a query queue, a bounded status log and a shutdown signal."""

    def __init__(self, max_status_log: int = 1000) -> None:
        self.queries: asyncio.Queue[QueryRequest] = asyncio.Queue()
        # deque with maxlen drops the oldest status when full
        self.statuses: deque[str] = deque(maxlen=max_status_log)
        self.shutdown_event = asyncio.Event()

    def send_query(self, query: str) -> QueryRequest:
        request = QueryRequest(query)
        self.queries.put_nowait(request)
        return request

    def send_status(self, message: str) -> None:
        self.statuses.append(message)

    @property
    def last_status(self) -> str:
        return self.statuses[-1] if self.statuses else ""

    def shutdown(self) -> None:
        logger.debug("Hub shutdown requested")
        self.shutdown_event.set()
