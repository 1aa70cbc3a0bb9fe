"""CLI entry point for logsieve."""

from __future__ import annotations

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from logsieve.commands.filters import filters_app
from logsieve.commands.view import view

app = typer.Typer(add_completion=False)
app.command()(view)
app.add_typer(filters_app, name="filters")


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,  # noqa: FBT002
) -> None:
    """Parse device logs and route them through filters."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def main() -> None:
    """Entry point for the CLI."""
    app()
