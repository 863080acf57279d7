"""linesift CLI - run the filtering engine from the command line.

    linesift filter QUERY [FILE]     Print the lines of FILE (or stdin) matching QUERY
    linesift matchers                List available matchers
"""

import asyncio
import dataclasses
import logging
from typing import TextIO

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from linesift import __version__
from linesift.cli.error_handler import handle_error
from linesift.filtering.external import ExternalCmdFilter
from linesift.filtering.registry import FilterSet, build_filter_set
from linesift.foundation.config import get_config, load_config
from linesift.foundation.errors import LinesiftError
from linesift.foundation.logging import configure_logging
from linesift.foundation.types.config import LinesiftConfig
from linesift.pipeline.buffer import LineBuffer
from linesift.pipeline.line import Line, RawLine
from linesift.query.hub import QueryHub
from linesift.query.orchestrator import QueryOrchestrator
from linesift.query.view import ActiveLineView, Selection

logger = logging.getLogger(__name__)

MATCH_STYLE = "bold magenta"


async def run_query(
    lines: list[Line],
    filters: FilterSet,
    query: str,
    *,
    sticky_selection: bool = False,
) -> tuple[list[Line], LinesiftError | None]:
    """Run a single query through the orchestrator and collect the result."""
    source = LineBuffer(lines)
    hub = QueryHub()
    view = ActiveLineView(source)
    orchestrator = QueryOrchestrator(
        source,
        filters,
        view,
        hub,
        Selection(),
        sticky_selection=sticky_selection,
    )

    loop_task = asyncio.create_task(orchestrator.loop(hub.queries, hub.shutdown_event))
    try:
        await hub.send_query(query).wait()
        await view.active.wait_done()
    finally:
        hub.shutdown()
        await loop_task
        await orchestrator.aclose()

    return view.active.lines(), orchestrator.last_error


def _load(config_path: str | None, enable_sep: bool) -> LinesiftConfig:
    config = load_config(config_path) if config_path else get_config()
    if enable_sep:
        config = dataclasses.replace(config, enable_sep=True)
    return config


def _highlight(line: Line) -> Text:
    text = Text(line.display_string())
    for start, end in line.indices():
        text.stylize(MATCH_STYLE, start, end)
    return text


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--persist-log", is_flag=True,
              help="Also write a debug log of this session to .linesift/logs/")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="Config file (default: .linesift/config.yaml)")
@click.version_option(version=__version__, prog_name="linesift")
@click.pass_context
def main(ctx: click.Context, debug: bool, persist_log: bool, config_path: str | None) -> None:
    """Incremental line filtering.

    \b
    EXAMPLES:
        ps aux | linesift filter python
        linesift filter -m Regexp 'err(or)? timeout' app.log
        linesift matchers
    """
    configure_logging(debug=debug, persist=persist_log)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command("filter")
@click.argument("query")
@click.argument("source", type=click.File("r", encoding="utf-8", errors="replace"), default="-")
@click.option("--matcher", "-m", default=None, help="Matcher to use (default: from config)")
@click.option("--null", "enable_sep", is_flag=True,
              help="Display the part before NUL, print the part after it")
@click.option("--no-color", is_flag=True, help="Print plain output without highlights")
@click.option("--json", "json_output", is_flag=True, help="Report errors as JSON")
@click.pass_context
def filter_lines(
    ctx: click.Context,
    query: str,
    source: TextIO,
    matcher: str | None,
    enable_sep: bool,
    no_color: bool,
    json_output: bool,
) -> None:
    """Print the lines of SOURCE that match QUERY."""
    try:
        config = _load(ctx.obj.get("config_path"), enable_sep)
        filters = build_filter_set(config)
        if matcher:
            filters.set_current_by_name(matcher)

        lines: list[Line] = [
            RawLine(raw.rstrip("\n"), config.enable_sep) for raw in source
        ]
        logger.debug("Read %d lines, matcher %s", len(lines), filters.current().name)

        results, error = asyncio.run(
            run_query(lines, filters, query, sticky_selection=config.sticky_selection)
        )
    except LinesiftError as e:
        handle_error(e, json_output)

    if error is not None:
        handle_error(error, json_output)

    if no_color:
        for line in results:
            click.echo(line.output())
        return

    console = Console(highlight=False, soft_wrap=True)
    for line in results:
        console.print(_highlight(line))


@main.command("matchers")
@click.pass_context
def list_matchers(ctx: click.Context) -> None:
    """List available matchers; the current one is marked."""
    try:
        config = _load(ctx.obj.get("config_path"), enable_sep=False)
        filters = build_filter_set(config)
    except LinesiftError as e:
        handle_error(e)

    current = filters.current()
    table = Table(show_header=True, box=None)
    table.add_column("", style="green")
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("Command", style="dim")

    for qf in filters:
        if isinstance(qf, ExternalCmdFilter):
            kind = "external"
            command = " ".join([qf.cmd, *qf.args])
        else:
            kind = "builtin"
            command = ""
        table.add_row("*" if qf is current else "", qf.name, kind, command)

    Console().print(table)
