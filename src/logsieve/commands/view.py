"""View command - stream a device log through filters and print the result."""

from __future__ import annotations

import asyncio
import contextlib
import sys
from pathlib import Path  # noqa: TC003 - typer needs this at runtime for argument parsing
from typing import Annotated

import typer

from logsieve.config import load_config
from logsieve.engine import LogEngine
from logsieve.models import AppConfig, FilterSpec
from logsieve.output import ConsoleOutput
from logsieve.reader import feed_file, feed_file_async, feed_stream, is_pipe

_VIEW_FILTER = "view"


def _build_engine(config: AppConfig, capacity: int | None, saved: bool) -> LogEngine:
    if capacity is not None:
        config = config.model_copy(update={"capacity": capacity})
    if not saved:
        config = config.model_copy(update={"filters": []})
    return LogEngine.from_config(config)


def _add_cli_filters(
    engine: LogEngine,
    specs: list[str],
    tag: str | None,
    pid: int | None,
    level: str | None,
) -> str | None:
    """Register --filter specs and the ad-hoc --tag/--pid/--level filter. Returns the ad-hoc filter name."""
    for value in specs:
        engine.add_filter_spec(FilterSpec.decode(value))
    if tag is None and pid is None and level is None:
        return None
    engine.add_filter(_VIEW_FILTER, tag=tag, pid=pid, min_level=level)
    return _VIEW_FILTER


def view(  # noqa: PLR0913
    file: Annotated[Path | None, typer.Argument(help="Captured device log (logcat -v long) to read")] = None,
    capacity: Annotated[int | None, typer.Option("--capacity", "-c", min=1, help="Records to retain")] = None,
    filters: Annotated[
        list[str] | None, typer.Option("--filter", "-f", help="Filter as name:mode[:pid][:level][:tag]")
    ] = None,
    saved: Annotated[bool, typer.Option("--saved", help="Also load saved filters")] = False,  # noqa: FBT002
    only: Annotated[str | None, typer.Option("--only", "-o", help="Print only this filter's records")] = None,
    show_all: Annotated[bool, typer.Option("--all", "-a", help="Print the records of every filter")] = False,  # noqa: FBT002
    tag: Annotated[str | None, typer.Option("--tag", help="Ad-hoc filter: exact tag")] = None,
    pid: Annotated[int | None, typer.Option("--pid", help="Ad-hoc filter: process id")] = None,
    level: Annotated[str | None, typer.Option("--level", "-l", help="Ad-hoc filter: minimum level (V/D/I/W/E)")] = None,
    keywords: Annotated[
        list[str] | None, typer.Option("--keyword", "-k", help="Temporary keyword (substring or regex)")
    ] = None,
    tail: Annotated[bool, typer.Option("--tail", "-t", help="Follow the file for new output")] = False,  # noqa: FBT002
) -> None:
    """Parse a device log and print the records accepted by a filter."""
    if file is not None and not file.is_file():
        typer.echo(f"Error: {file} is not a file")
        raise typer.Exit(1)
    if file is None and not is_pipe():
        typer.echo("Error: provide a file or pipe input")
        raise typer.Exit(1)
    if tail and file is None:
        typer.echo("Error: --tail needs a file")
        raise typer.Exit(1)

    config = load_config()
    try:
        engine = _build_engine(config, capacity, saved)
        adhoc = _add_cli_filters(engine, filters or [], tag, pid, level)
        target = engine.get_filter(only or adhoc or engine.default_filter.name)
        if keywords:
            engine.set_temporary_filter(target.name, keywords=keywords)
    except (ValueError, KeyError) as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(1)  # noqa: B904

    if show_all:
        for f in (*engine.filters, engine.default_filter):
            f.output = ConsoleOutput(colors=f.colors)
    else:
        target.output = ConsoleOutput(colors=target.colors, show_filter=False)

    if file is None:
        feed_stream(sys.stdin.buffer, engine, config.chunk_size)
    elif tail:
        with contextlib.suppress(KeyboardInterrupt):
            asyncio.run(feed_file_async(file, engine, config.chunk_size, tail=True))
        engine.end_of_stream()
    else:
        feed_file(file, engine, config.chunk_size)
