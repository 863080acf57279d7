"""Cancellation tokens and line channels.

A pass is wired together from small bounded channels. The producer owns
its output channel and closes it when done. Whoever started the pass owns
the ``CancelToken``; closing it is the only cancellation signal and every
stage observes it, so one ``close()`` stops the whole pass.

Example:
    >>> token = CancelToken()
    >>> channel = LineChannel()
    >>> await channel.send(RawLine("hello"), token)
    True
    >>> channel.close()
    >>> [line.display_string() async for line in channel.iterate(token)]
    ['hello']
"""


import asyncio
from collections.abc import AsyncIterator, Awaitable
from typing import Any, Protocol, TypeVar

from linesift.pipeline.line import Line


class _Signal(Protocol):
    async def wait(self) -> Any: ...


class CancelToken:
    """One-shot broadcast cancellation signal.

    Closing is the only operation; a token is never reset or reused.
    Any number of tasks may observe it concurrently.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._event.is_set()

    def close(self) -> None:
        """Broadcast cancellation.

        Raises:
            RuntimeError: If the token was already closed.
        """
        if self._event.is_set():
            raise RuntimeError("cancel token already closed")
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    def __repr__(self) -> str:
        return f"CancelToken(closed={self.closed})"


T = TypeVar("T")


async def wait_first(work: Awaitable[T], *signals: _Signal) -> tuple[bool, T | None]:
    """Await ``work`` unless one of ``signals`` fires first.

    Returns:
        ``(True, result)`` when the work finished, ``(False, None)`` when a
        signal won the race. The losing side is cancelled.
    """
    main = asyncio.ensure_future(work)
    waiters = [asyncio.ensure_future(signal.wait()) for signal in signals]
    try:
        done, _ = await asyncio.wait([main, *waiters], return_when=asyncio.FIRST_COMPLETED)
    finally:
        for waiter in waiters:
            waiter.cancel()
        if not main.done():
            main.cancel()

    if main in done and not main.cancelled():
        return True, main.result()
    return False, None


class LineChannel:
    """Small bounded channel of lines.

    ``close()`` never blocks, so a producer can always terminate the
    stream even if nobody is reading anymore.
    """

    def __init__(self, capacity: int = 1) -> None:
        self._queue: asyncio.Queue[Line] = asyncio.Queue(maxsize=capacity)
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    async def send(self, line: Line, cancel: CancelToken | None = None) -> bool:
        """Hand a line to the consumer.

        Returns:
            False if ``cancel`` fired before the line was accepted.

        Raises:
            RuntimeError: On a closed channel.
        """
        if self._closed.is_set():
            raise RuntimeError("send on closed channel")
        if cancel is not None and cancel.closed:
            return False
        if not self._queue.full():
            self._queue.put_nowait(line)
            return True
        if cancel is None:
            await self._queue.put(line)
            return True

        sent, _ = await wait_first(self._queue.put(line), cancel)
        return sent

    async def receive(self, cancel: CancelToken | None = None) -> Line | None:
        """Take the next line.

        Returns:
            The next line, or None once the channel is closed and drained
            or ``cancel`` has fired.
        """
        if cancel is not None and cancel.closed:
            return None
        if not self._queue.empty():
            return self._queue.get_nowait()
        if self._closed.is_set():
            return None

        signals: list[_Signal] = [self._closed]
        if cancel is not None:
            signals.append(cancel)
        received, line = await wait_first(self._queue.get(), *signals)
        if received:
            return line
        if cancel is not None and cancel.closed:
            return None
        # Closed while we waited; the producer may have left a final line
        if not self._queue.empty():
            return self._queue.get_nowait()
        return None

    async def iterate(self, cancel: CancelToken | None = None) -> AsyncIterator[Line]:
        """Yield lines until closure or cancellation."""
        while (line := await self.receive(cancel)) is not None:
            yield line
