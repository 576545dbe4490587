"""``netgap client`` — run the probe and print the throughput report."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from netgap._internal.config import DEFAULT_MSG_LENGTH, DEFAULT_PORT, ClientConfig
from netgap._internal.errors import NetgapError
from netgap._internal.logging import setup_logging
from netgap.client.orchestrator import ClientOrchestrator
from netgap.metrics.rate import format_bytes_rate

if TYPE_CHECKING:
    from netgap.metrics.models import RunReport

console = Console(stderr=True)
report_console = Console()


def _print_report(report: RunReport) -> None:
    """Print the final report to standard output.

    Args:
        report: Aggregated result of the run.
    """
    metrics = report.metrics
    table = Table(
        title="Probe Complete",
        show_header=True,
        header_style="bold green",
    )
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Channels", f"{report.completed_channels}/{report.channels} completed")
    table.add_row("Connected", str(report.connected_channels))
    table.add_row("Total", str(metrics.total))
    table.add_row("Success", str(metrics.success))
    table.add_row("Failed", str(metrics.failed))
    table.add_row("Unresolved", str(metrics.unresolved))
    table.add_row("Bytes", str(metrics.bytes))
    table.add_row("Success Rate", f"{report.success_rate * 100:.2f}%")
    table.add_row("Time Cost", f"{report.elapsed_seconds:.3f}s")
    table.add_row("Rate", format_bytes_rate(report.bytes_per_second))

    latency = report.latency
    if latency.count:
        table.add_row("Ack p50", f"{latency.p50_ms:.2f}ms")
        table.add_row("Ack p95", f"{latency.p95_ms:.2f}ms")
        table.add_row("Ack p99", f"{latency.p99_ms:.2f}ms")
        table.add_row("Ack max", f"{latency.max_ms:.2f}ms")

    report_console.print(table)

    if report.failed_channels:
        failed = Table(title="Aborted Channels", show_header=True, header_style="bold red")
        failed.add_column("Channel", justify="right")
        failed.add_column("Error")
        for channel_id, error in report.failed_channels:
            failed.add_row(str(channel_id), escape(error))
        report_console.print(failed)


def client_cmd(
    host: str = typer.Option(
        ...,
        "--host",
        help="The host to connect to.",
    ),
    port: int = typer.Option(
        DEFAULT_PORT,
        "--port",
        "-p",
        help="The port to connect to.",
        min=1,
        max=65535,
    ),
    channels: int = typer.Option(
        1,
        "--channels",
        "-c",
        help="The number of concurrent channels.",
        min=1,
    ),
    msg_total: int = typer.Option(
        10,
        "--msg-total",
        help="The total number of messages across all channels.",
        min=0,
    ),
    msg_length: int = typer.Option(
        DEFAULT_MSG_LENGTH,
        "--msg-length",
        help="The length of each message in bytes.",
        min=1,
    ),
    msg_interval_ms: int = typer.Option(
        1000,
        "--msg-interval-ms",
        help="The pause after each message, per channel, in milliseconds.",
        min=0,
    ),
    read_timeout: int = typer.Option(
        1000,
        "--read-timeout",
        help="The ack read timeout in milliseconds.",
        min=1,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
    log_json: bool = typer.Option(
        False,
        "--log-json",
        help="Emit structured JSON logs.",
    ),
) -> None:
    """Send fixed-size messages over one or more channels and report throughput."""
    setup_logging(level=logging.DEBUG if verbose else logging.INFO, json_format=log_json)

    try:
        config = ClientConfig(
            host=host,
            port=port,
            channels=channels,
            msg_total=msg_total,
            msg_length=msg_length,
            msg_interval_ms=msg_interval_ms,
            read_timeout_ms=read_timeout,
        ).validate()
    except NetgapError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    if config.msg_total % config.channels:
        console.print(
            f"[yellow]{config.msg_total % config.channels} message(s) not divisible "
            f"across {config.channels} channel(s) will not be sent.[/yellow]"
        )

    console.print(
        Panel(
            f"[bold]Target:[/bold]   {config.host}:{config.port}\n"
            f"[bold]Channels:[/bold] {config.channels}\n"
            f"[bold]Messages:[/bold] {config.messages_per_channel} per channel, "
            f"{config.msg_length} bytes each\n"
            f"[bold]Interval:[/bold] {config.msg_interval_ms}ms",
            title="netgap client",
            border_style="cyan",
        )
    )

    report = ClientOrchestrator(config).run()
    _print_report(report)
