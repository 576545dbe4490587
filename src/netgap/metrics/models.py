"""Probe metric dataclasses for netgap."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from netgap.metrics.histogram import LatencyHistogram

__all__ = [
    "ChannelResult",
    "LatencySummary",
    "Metrics",
    "RunReport",
]


@dataclass
class Metrics:
    """Send/ack counters for one channel, or the sum over many.

    Each instance is owned by a single worker thread until the worker
    finishes; only then is it combined with others.

    Attributes:
        total: Messages attempted.
        success: Messages acknowledged with the success byte.
        failed: Messages acknowledged with the failure byte.
        bytes: Payload bytes written (attempted, not confirmed).
    """

    total: int = 0
    success: int = 0
    failed: int = 0
    bytes: int = 0

    def __add__(self, other: Metrics) -> Metrics:
        if not isinstance(other, Metrics):
            return NotImplemented
        return Metrics(
            total=self.total + other.total,
            success=self.success + other.success,
            failed=self.failed + other.failed,
            bytes=self.bytes + other.bytes,
        )

    def merge(self, other: Metrics) -> None:
        """Add another instance's counters into this one in place."""
        self.total += other.total
        self.success += other.success
        self.failed += other.failed
        self.bytes += other.bytes

    @property
    def unresolved(self) -> int:
        """Attempts whose ack never arrived or carried an unknown value."""
        return self.total - self.success - self.failed

    @classmethod
    def combine(cls, items: Iterable[Metrics]) -> Metrics:
        """Field-wise sum of ``items``; all zeros when empty."""
        combined = cls()
        for item in items:
            combined.merge(item)
        return combined


@dataclass(frozen=True)
class LatencySummary:
    """Ack round-trip latency statistics in milliseconds.

    All fields are 0 when nothing was recorded.
    """

    count: int = 0
    min_ms: float = 0.0
    mean_ms: float = 0.0
    p50_ms: float = 0.0
    p95_ms: float = 0.0
    p99_ms: float = 0.0
    max_ms: float = 0.0


@dataclass
class ChannelResult:
    """Outcome of a single channel that ran to completion.

    Attributes:
        channel_id: Zero-based channel index.
        connected: False when the connection could not be opened.
        metrics: Final counters for this channel.
        latency: Round-trip times of resolved acks.
    """

    channel_id: int
    connected: bool
    metrics: Metrics
    latency: LatencyHistogram


@dataclass
class RunReport:
    """Aggregate result of a client run.

    Attributes:
        metrics: Field-wise sum over channels that completed.
        elapsed_seconds: Wall-clock time from fan-out to the last join.
        channels: Number of channels launched.
        connected_channels: Channels that opened a connection and finished.
        completed_channels: Channels that returned a result (connected or not).
        failed_channels: ``(channel_id, error)`` for channels that aborted.
        latency: Ack latency over all completed channels.
    """

    metrics: Metrics
    elapsed_seconds: float
    channels: int
    connected_channels: int = 0
    completed_channels: int = 0
    failed_channels: list[tuple[int, str]] = field(default_factory=list)
    latency: LatencySummary = field(default_factory=LatencySummary)

    @property
    def bytes_per_second(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.metrics.bytes / self.elapsed_seconds

    @property
    def success_rate(self) -> float:
        """Fraction of attempted messages acknowledged positively (0.0 to 1.0)."""
        if self.metrics.total == 0:
            return 0.0
        return self.metrics.success / self.metrics.total
