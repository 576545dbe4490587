"""``netgap server`` — accept probe connections and acknowledge each read."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from netgap._internal.config import DEFAULT_PORT, ServerConfig
from netgap._internal.errors import NetgapError
from netgap._internal.logging import setup_logging
from netgap.server.listener import Listener

console = Console(stderr=True)

_TRUE_WORDS = frozenset({"true", "yes", "on", "1"})
_FALSE_WORDS = frozenset({"false", "no", "off", "0"})


def _parse_bool(value: str, option: str) -> bool:
    """Parse a boolean word such as ``true`` or ``no``.

    Raises:
        typer.BadParameter: If the word is not recognised.
    """
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    msg = f"{option} expects true or false, got: {value!r}"
    raise typer.BadParameter(msg)


def server_cmd(
    port: int = typer.Option(
        DEFAULT_PORT,
        "--port",
        "-p",
        help="The port to listen on.",
        min=0,
        max=65535,
    ),
    ack: str = typer.Option(
        "true",
        "--ack",
        "-a",
        metavar="true|false",
        help="Whether to send an ack byte to the client for every read.",
    ),
    host: str = typer.Option(
        "0.0.0.0",  # noqa: S104
        "--host",
        help="The interface address to bind.",
    ),
    buffer_size: int = typer.Option(
        65536,
        "--buffer-size",
        help="Maximum bytes taken per read.",
        min=1,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging, including every received size.",
    ),
    log_json: bool = typer.Option(
        False,
        "--log-json",
        help="Emit structured JSON logs.",
    ),
) -> None:
    """Run the probe server until interrupted."""
    ack_enabled = _parse_bool(ack, "--ack")
    setup_logging(level=logging.DEBUG if verbose else logging.INFO, json_format=log_json)

    try:
        config = ServerConfig(
            port=port,
            ack_enabled=ack_enabled,
            host=host,
            recv_buffer_size=buffer_size,
        ).validate()
        listener = Listener(config)
        bound_host, bound_port = listener.bind()
    except NetgapError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    console.print(
        Panel(
            f"[bold]Address:[/bold] {bound_host}:{bound_port}\n"
            f"[bold]Ack:[/bold]     {'enabled' if ack_enabled else 'disabled'}",
            title="netgap server",
            border_style="cyan",
        )
    )

    try:
        listener.serve_forever()
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted, shutting down.[/yellow]")
    except NetgapError as exc:
        console.print(f"[red]Server failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    finally:
        listener.close()
