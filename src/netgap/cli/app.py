"""Main Typer application — entry point for the ``netgap`` CLI."""

from __future__ import annotations

import typer

from netgap import __version__
from netgap.cli.client import client_cmd
from netgap.cli.server import server_cmd

app = typer.Typer(
    name="netgap",
    help="Measure TCP throughput and ack reliability between two hosts.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("server", help="Run as a server.")(server_cmd)
app.command("client", help="Run as a client.")(client_cmd)


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"netgap {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """netgap — a TCP throughput and reliability probe."""
