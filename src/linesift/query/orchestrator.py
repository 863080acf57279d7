"""Query orchestrator - turns a stream of query changes into matching passes.

Queries arrive faster than passes finish. Every new query closes the
cancel token of the previous pass and starts a new pass with a fresh
token, so at most one pass is authoritative. A cancelled pass is not
awaited: it notices its closed token within one line and its output
only ever lands in its own buffer, which nobody displays anymore.

Example:
    >>> hub = QueryHub()
    >>> orchestrator = QueryOrchestrator(source, filters, view, hub)
    >>> loop_task = asyncio.create_task(orchestrator.loop(hub.queries, hub.shutdown_event))
    >>> await hub.send_query("error").wait()
"""


import asyncio
import logging
from functools import partial
from typing import Any

from linesift.filtering.registry import FilterSet
from linesift.foundation.errors import LinesiftError, PatternCompileError
from linesift.pipeline.buffer import LineBuffer
from linesift.pipeline.channel import CancelToken, wait_first
from linesift.pipeline.core import spawn
from linesift.query.hub import QueryRequest, ResultView, SelectionControl, StatusSink

logger = logging.getLogger(__name__)

RUNNING_STATUS = "Running query..."


class QueryOrchestrator:
    """Serializes matching passes over one source."""

    def __init__(
        self,
        source: LineBuffer,
        filters: FilterSet,
        view: ResultView,
        status: StatusSink,
        selection: SelectionControl | None = None,
        *,
        sticky_selection: bool = False,
    ) -> None:
        self.source = source
        self.filters = filters
        self.view = view
        self.status = status
        self.selection = selection
        self.sticky_selection = sticky_selection

        self._previous: CancelToken | None = None
        self._work_tasks: set[asyncio.Task[Any]] = set()
        self.passes_started = 0
        self.last_error: LinesiftError | None = None

    @property
    def active_token(self) -> CancelToken | None:
        """Cancel token of the most recently dispatched query."""
        return self._previous

    async def loop(self, queries: asyncio.Queue[QueryRequest], shutdown: asyncio.Event) -> None:
        """Dispatch incoming queries until ``shutdown`` is set."""
        logger.debug("Query loop started")
        try:
            while not shutdown.is_set():
                received, request = await wait_first(queries.get(), shutdown)
                if not received or request is None:
                    break
                self.dispatch(request)
        finally:
            logger.debug("Query loop stopped")

    def submit(self, query: str) -> QueryRequest:
        """Dispatch ``query`` directly, bypassing the hub."""
        request = QueryRequest(query)
        self.dispatch(request)
        return request

    def dispatch(self, request: QueryRequest) -> asyncio.Task[Any]:
        """Cancel the previous pass and schedule one for ``request``."""
        if self._previous is not None and not self._previous.closed:
            self._previous.close()
        token = CancelToken()
        self._previous = token

        self.status.send_status(RUNNING_STATUS)
        task = spawn(self.work(token, request), name="query-work")
        self._work_tasks.add(task)
        task.add_done_callback(self._work_tasks.discard)
        return task

    async def work(self, token: CancelToken, request: QueryRequest) -> None:
        """Run one query and acknowledge it."""
        try:
            if token.closed:
                # Superseded before it got to run
                logger.debug("Skipping superseded query %r", request.query)
                return

            if request.query == "":
                logger.debug("Resetting active line buffer")
                self.view.reset_active_line_buffer()
                self.status.send_status("")
            else:
                self._start_pass(token, request.query)

            if not self.sticky_selection and self.selection is not None:
                self.selection.clear()
        finally:
            request.done()

    def _start_pass(self, token: CancelToken, query: str) -> None:
        qf = self.filters.current().clone()
        qf.set_query(query)

        try:
            qf.accept(self.source.replay(token))
        except PatternCompileError as e:
            logger.debug("Query %r does not compile: %s", query, e)
            self.last_error = e
            self.view.set_active_line_buffer(LineBuffer())
            self.status.send_status(f"Invalid query: {e.message}")
            return

        self.last_error = None
        self.passes_started += 1
        buf = LineBuffer(on_end=partial(self._pass_ended, token))
        buf.accept(qf)
        self.view.set_active_line_buffer(buf)

    def _pass_ended(self, token: CancelToken) -> None:
        # A superseded pass must not clear the status of its successor
        if token is self._previous:
            self.status.send_status("")

    async def aclose(self) -> None:
        """Cancel the live pass and wait for scheduled work to finish."""
        if self._previous is not None and not self._previous.closed:
            self._previous.close()
        if self._work_tasks:
            await asyncio.gather(*self._work_tasks, return_exceptions=True)
