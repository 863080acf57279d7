"""Pipeline handshake between line producers and consumers.

A ``Pipeliner`` hands out a ``Pipeline``: the cancel token of the pass it
belongs to and the channel it writes lines into. Stages are chained by
calling ``accept(upstream)``, which starts a task reading upstream's
channel and writing into the stage's own channel.
"""


import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from linesift.pipeline.channel import CancelToken, LineChannel
from linesift.pipeline.line import Line

logger = logging.getLogger(__name__)

# Strong references to running pass tasks; the event loop only keeps weak ones
_background_tasks: set[asyncio.Task[Any]] = set()


class FilterDidNotMatch(Exception):
    """The filter rejected a line. Not an error: the line is dropped."""


@dataclass(frozen=True, slots=True)
class Pipeline:
    """Cancel token plus output channel of one stage."""

    cancel: CancelToken
    channel: LineChannel


@runtime_checkable
class Pipeliner(Protocol):
    """Something that can hand out a running pipeline."""

    def pipeline(self) -> Pipeline: ...


def _log_task_failure(task: asyncio.Task[Any]) -> None:
    if task.cancelled():
        return
    if exc := task.exception():
        logger.error("Pipeline task %s failed: %s", task.get_name(), exc, exc_info=exc)


def spawn(coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task[Any]:
    """Start a pipeline task and keep it alive until it finishes."""
    task = asyncio.create_task(coro, name=name)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    task.add_done_callback(_log_task_failure)
    return task


async def accept_pipeline(
    source: Pipeline,
    output: LineChannel,
    transform: Callable[[Line], Line],
    on_end: Callable[[], None] | None = None,
) -> None:
    """Consume ``source``, transform every line and forward the survivors.

    Lines for which ``transform`` raises ``FilterDidNotMatch`` are dropped.
    Stops at upstream closure or cancellation, whichever comes first, and
    always closes ``output``.
    """
    try:
        while (line := await source.channel.receive(source.cancel)) is not None:
            try:
                result = transform(line)
            except FilterDidNotMatch:
                continue
            if not await output.send(result, source.cancel):
                break
    finally:
        output.close()
        if on_end is not None:
            on_end()
