"""HDR histogram of ack round-trip latencies.

Wraps ``hdrh.histogram.HdrHistogram`` with a millisecond API. Values are
stored as integer microseconds, the HDR histogram's native unit here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hdrh.histogram import HdrHistogram  # type: ignore[import-untyped]

from netgap.metrics.models import LatencySummary

if TYPE_CHECKING:
    from collections.abc import Iterable

# Range: 1 microsecond to 60 seconds (in microseconds)
_LOWEST_TRACKABLE_US = 1
_HIGHEST_TRACKABLE_US = 60_000_000
_SIGNIFICANT_DIGITS = 3


class LatencyHistogram:
    """Latency histogram owned by one channel, mergeable after join.

    All public methods accept and return values in **milliseconds**.
    Recorded values are clamped to the trackable range.
    """

    def __init__(self) -> None:
        self._histogram: HdrHistogram = HdrHistogram(  # type: ignore[no-any-unimported]
            _LOWEST_TRACKABLE_US, _HIGHEST_TRACKABLE_US, _SIGNIFICANT_DIGITS
        )

    def record_ms(self, latency_ms: float) -> None:
        """Record one ack round-trip time.

        Args:
            latency_ms: Time from the start of the write to the ack byte,
                in milliseconds. Clamped to 1us..60s.
        """
        value_us = int(latency_ms * 1000)
        value_us = max(_LOWEST_TRACKABLE_US, min(value_us, _HIGHEST_TRACKABLE_US))
        self._histogram.record_value(value_us)

    @property
    def count(self) -> int:
        """Number of recorded round trips."""
        return int(self._histogram.total_count)

    def percentile(self, percentile: float) -> float:
        """Value at ``percentile`` (0.0 to 100.0) in ms, or 0.0 if empty."""
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_value_at_percentile(percentile)) / 1000.0

    def add(self, other: LatencyHistogram) -> None:
        """Merge another histogram into this one."""
        self._histogram.add(other._histogram)

    def summary(self) -> LatencySummary:
        """Freeze the recorded values into report statistics.

        Returns:
            LatencySummary in milliseconds; all zeros if nothing was recorded.
        """
        if self.count == 0:
            return LatencySummary()
        return LatencySummary(
            count=self.count,
            min_ms=float(self._histogram.get_min_value()) / 1000.0,
            mean_ms=float(self._histogram.get_mean_value()) / 1000.0,
            p50_ms=self.percentile(50.0),
            p95_ms=self.percentile(95.0),
            p99_ms=self.percentile(99.0),
            max_ms=float(self._histogram.get_max_value()) / 1000.0,
        )

    @classmethod
    def combine(cls, items: Iterable[LatencyHistogram]) -> LatencyHistogram:
        """Merge per-channel histograms into a new one.

        Args:
            items: Histograms of joined channels. They are left unchanged.

        Returns:
            A fresh histogram holding every recorded value; empty when
            ``items`` is empty.
        """
        combined = cls()
        for item in items:
            combined.add(item)
        return combined
