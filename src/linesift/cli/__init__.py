"""linesift command-line interface."""

from linesift.cli.main import main

__all__ = ["main"]
