"""Filters subcommands: manage saved filters."""

from __future__ import annotations

from typing import Annotated

import typer

from logsieve.config import add_saved_filter, remove_saved_filter, saved_filter_specs
from logsieve.models import FilterMode, FilterSpec

filters_app = typer.Typer(name="filters", help="Manage saved filters")


def _describe(spec: FilterSpec) -> str:
    parts: list[str] = []
    if spec.mode & FilterMode.PID:
        parts.append(f"pid={spec.pid}")
    if spec.mode & FilterMode.TAG:
        parts.append(f"tag={spec.tag}")
    if spec.mode & FilterMode.LEVEL and spec.min_level is not None:
        parts.append(f"level>={spec.min_level.letter}")
    return ", ".join(parts) or "everything"


@filters_app.command("list")
def list_filters() -> None:
    """List saved filters."""
    specs = saved_filter_specs()
    if not specs:
        typer.echo("No saved filters")
        return
    for spec in specs:
        typer.echo(f"{spec.name}\t{_describe(spec)}\t{spec.encode()}")


@filters_app.command("add")
def add(
    name: Annotated[str, typer.Argument(help="Filter name")],
    tag: Annotated[str | None, typer.Option("--tag", help="Exact tag")] = None,
    pid: Annotated[int | None, typer.Option("--pid", help="Process id")] = None,
    level: Annotated[str | None, typer.Option("--level", "-l", help="Minimum level (V/D/I/W/E)")] = None,
) -> None:
    """Save a filter (replaces a saved filter with the same name)."""
    try:
        spec = FilterSpec.build(name, tag=tag, pid=pid, min_level=level)
    except ValueError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(1)  # noqa: B904
    add_saved_filter(spec)
    typer.echo(f"Saved {spec.encode()}")


@filters_app.command("remove")
def remove(name: Annotated[str, typer.Argument(help="Filter name")]) -> None:
    """Delete a saved filter."""
    try:
        remove_saved_filter(name)
    except KeyError:
        typer.echo(f"Error: no saved filter named '{name}'")
        raise typer.Exit(1)  # noqa: B904
    typer.echo(f"Removed {name}")
