"""Query handling: the hub that carries queries in and the orchestrator that runs them."""

from linesift.query.hub import (
    QueryHub,
    QueryRequest,
    ResultView,
    SelectionControl,
    StatusSink,
)
from linesift.query.orchestrator import RUNNING_STATUS, QueryOrchestrator
from linesift.query.view import ActiveLineView, Selection

__all__ = [
    "QueryHub",
    "QueryRequest",
    "QueryOrchestrator",
    "RUNNING_STATUS",
    "ResultView",
    "SelectionControl",
    "StatusSink",
    "ActiveLineView",
    "Selection",
]
