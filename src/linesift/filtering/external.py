"""External command matching strategy.

Delegates matching to another program. Lines are collected into batches
of ``threshold`` lines; each batch is written to a fresh process' stdin
and whatever the process prints becomes the result, one line per output
line. The query reaches the process through its arguments: every
argument equal to ``$QUERY`` is replaced with the live query.

External programs report no match positions, so results carry no spans.

A batch that fails at runtime (spawn, write or read) yields no lines
and is counted in ``batches_failed``; the pass itself keeps going.
"""


import asyncio
import contextlib
import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from linesift.foundation.errors import config_error, external_cmd_error, runtime_error
from linesift.foundation.types.config import DEFAULT_BUFFER_THRESHOLD, CustomMatcherConfig
from linesift.pipeline.channel import CancelToken, LineChannel, wait_first
from linesift.pipeline.core import Pipeline, Pipeliner, spawn
from linesift.pipeline.line import Line, MatchedLine, RawLine

logger = logging.getLogger(__name__)

QUERY_PLACEHOLDER = "$QUERY"

# Longest stdout line read from a custom matcher
STREAM_LIMIT = 16 * 1024 * 1024


@dataclass(eq=False)
class ExternalCmdFilter:
    """Runs ``cmd`` over batches of lines and keeps what it prints."""

    name: str
    cmd: str
    args: tuple[str, ...] = ()
    threshold: int = DEFAULT_BUFFER_THRESHOLD
    enable_sep: bool = False
    query: str = ""
    on_batch_failed: Callable[[Exception], None] | None = field(default=None, repr=False)

    batches_run: int = field(default=0, init=False)
    batches_failed: int = field(default=0, init=False)
    _pipeline: Pipeline | None = field(default=None, init=False, repr=False)
    _task: asyncio.Task[Any] | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.args = tuple(self.args) or (QUERY_PLACEHOLDER,)
        if self.threshold < 1:
            raise config_error(
                f"custom_matcher.{self.name}.buffer_threshold",
                f"expected a positive integer, got {self.threshold!r}",
            )

    @classmethod
    def from_config(cls, matcher: CustomMatcherConfig, *, enable_sep: bool = False) -> "ExternalCmdFilter":
        return cls(
            name=matcher.name,
            cmd=matcher.cmd,
            args=matcher.args,
            threshold=matcher.buffer_threshold,
            enable_sep=enable_sep,
        )

    def verify(self) -> None:
        """Check the executable can be found.

        Raises:
            ExternalCommandError: If no command is set or it is not on PATH.
        """
        if not self.cmd or shutil.which(self.cmd) is None:
            raise external_cmd_error(self.name, self.cmd)

    def set_query(self, query: str) -> None:
        self.query = query

    def command_args(self) -> list[str]:
        """Arguments with the query substituted."""
        return [self.query if arg == QUERY_PLACEHOLDER else arg for arg in self.args]

    def accept(self, upstream: Pipeliner) -> None:
        source = upstream.pipeline()
        output = LineChannel()
        self._pipeline = Pipeline(source.cancel, output)
        self._task = spawn(self._run(source, output), name=f"external-{self.name}")

    def pipeline(self) -> Pipeline:
        if self._pipeline is None:
            raise runtime_error(f"filter '{self.name}' has not accepted a source")
        return self._pipeline

    async def wait_done(self) -> None:
        if self._task is not None:
            await self._task

    def clone(self) -> "ExternalCmdFilter":
        return ExternalCmdFilter(
            name=self.name,
            cmd=self.cmd,
            args=self.args,
            threshold=self.threshold,
            enable_sep=self.enable_sep,
            query=self.query,
            on_batch_failed=self.on_batch_failed,
        )

    def __str__(self) -> str:
        return self.name

    # -- batching ------------------------------------------------------------

    async def _run(self, source: Pipeline, output: LineChannel) -> None:
        try:
            batch: list[Line] = []
            while (line := await source.channel.receive(source.cancel)) is not None:
                batch.append(line)
                if len(batch) < self.threshold:
                    continue
                if not await self._launch(batch, source.cancel, output):
                    return
                batch = []

            if batch and not source.cancel.closed:
                await self._launch(batch, source.cancel, output)
        finally:
            output.close()
            logger.debug("External filter %s done after %d batches", self.name, self.batches_run)

    async def _launch(self, batch: list[Line], cancel: CancelToken, output: LineChannel) -> bool:
        """Run the command over one batch.

        Returns:
            False once the pass has been cancelled.
        """
        self.batches_run += 1
        data = "".join(f"{line.display_string()}\n" for line in batch).encode("utf-8")

        proc: asyncio.subprocess.Process | None = None
        reader: asyncio.Task[None] | None = None
        try:
            proc = await asyncio.create_subprocess_exec(
                self.cmd,
                *self.command_args(),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                limit=STREAM_LIMIT,
            )

            results = LineChannel()
            reader = asyncio.create_task(self._pump(proc, data, results, cancel))
            while (result := await results.receive(cancel)) is not None:
                if not await output.send(result, cancel):
                    break

            if cancel.closed:
                return False
            # A command can close stdout while its stdin is still being fed
            finished, _ = await wait_first(reader, cancel)
            if not finished:
                return False
        except Exception as e:
            self._batch_failed(e)
        finally:
            if reader is not None and not reader.done():
                reader.cancel()
            if proc is not None:
                await _reap(proc)

        return not cancel.closed

    async def _pump(
        self,
        proc: asyncio.subprocess.Process,
        data: bytes,
        results: LineChannel,
        cancel: CancelToken,
    ) -> None:
        """Feed the batch to stdin while reading stdout line by line."""
        writer = asyncio.create_task(_feed(proc, data))
        try:
            assert proc.stdout is not None
            while raw := await proc.stdout.readline():
                text = raw.removesuffix(b"\n").removesuffix(b"\r").decode("utf-8", errors="replace")
                if not text:
                    continue
                line = MatchedLine(RawLine(text, self.enable_sep), [])
                if not await results.send(line, cancel):
                    return
            await writer
        finally:
            results.close()
            if not writer.done():
                writer.cancel()

    def _batch_failed(self, error: Exception) -> None:
        self.batches_failed += 1
        logger.warning("Custom matcher %s: batch failed: %s", self.name, error)
        if self.on_batch_failed is not None:
            self.on_batch_failed(error)


async def _feed(proc: asyncio.subprocess.Process, data: bytes) -> None:
    assert proc.stdin is not None
    try:
        proc.stdin.write(data)
        await proc.stdin.drain()
        proc.stdin.close()
    except (BrokenPipeError, ConnectionResetError):
        # The command exited without reading all of its input
        logger.debug("External command closed stdin early")


async def _reap(proc: asyncio.subprocess.Process) -> None:
    """Kill the process if it is still running and wait for it."""
    if proc.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
    await proc.wait()
