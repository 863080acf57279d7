"""CLI Error Handler.

Provides unified error handling for the CLI with support for:
- Human-readable output (default)
- JSON output for machine consumption
"""

import json
import sys
from typing import NoReturn

from rich.console import Console
from rich.text import Text

from linesift.foundation.errors import ErrorCode, LinesiftError


def handle_error(
    error: LinesiftError | Exception,
    json_output: bool = False,
) -> NoReturn:
    """Report an error and exit.

    Raises:
        SystemExit: Always exits with code 1
    """
    if not isinstance(error, LinesiftError):
        error = LinesiftError(
            code=ErrorCode.RUNTIME_STATE_INVALID,
            context={"detail": str(error)},
            cause=error,
        )

    if json_output:
        error_dict = error.to_dict()
        if error.cause:
            error_dict["cause"] = str(error.cause)
        print(json.dumps(error_dict), file=sys.stderr)
        sys.exit(1)

    _print_human_error(error)
    sys.exit(1)


def _print_human_error(error: LinesiftError) -> None:
    console = Console(stderr=True)

    header = Text()
    header.append(error.error_id, style="bold red")
    header.append(f" {error.message}")
    console.print(header)

    if error.recovery_hints:
        console.print("\n[bold]What you can do:[/]")
        for i, hint in enumerate(error.recovery_hints, 1):
            console.print(f"  {i}. {hint}")
