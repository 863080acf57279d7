"""Line pipeline primitives.

Lines, cancel tokens, channels, the producer/consumer handshake and the
in-memory buffer used as both source and sink of a pass.
"""

from linesift.pipeline.buffer import BufferReplay, LineBuffer
from linesift.pipeline.channel import CancelToken, LineChannel, wait_first
from linesift.pipeline.core import (
    FilterDidNotMatch,
    Pipeline,
    Pipeliner,
    accept_pipeline,
    spawn,
)
from linesift.pipeline.line import Line, MatchedLine, RawLine, Span

__all__ = [
    # Lines
    "Line",
    "RawLine",
    "MatchedLine",
    "Span",
    # Handshake
    "CancelToken",
    "LineChannel",
    "Pipeline",
    "Pipeliner",
    "FilterDidNotMatch",
    "accept_pipeline",
    "spawn",
    "wait_first",
    # Buffer
    "LineBuffer",
    "BufferReplay",
]
