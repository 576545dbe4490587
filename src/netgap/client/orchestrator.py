"""Fans out channel workers, joins them, and aggregates their metrics."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from netgap._internal.errors import ChannelError
from netgap._internal.logging import get_logger
from netgap.client.worker import ChannelWorker
from netgap.metrics.histogram import LatencyHistogram
from netgap.metrics.models import Metrics, RunReport

if TYPE_CHECKING:
    from collections.abc import Callable
    from concurrent.futures import Future

    from netgap._internal.config import ClientConfig
    from netgap.metrics.models import ChannelResult

logger = get_logger("client.orchestrator")


class ClientOrchestrator:
    """Runs ``config.channels`` workers concurrently, one thread each.

    Each worker owns its metrics until its thread ends. Aggregation happens
    only after every worker has been joined, so no locking is needed. A
    worker that raises is logged and left out of the aggregate; the others
    are unaffected.

    Attributes:
        config: Client configuration handed to every worker.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        worker_factory: Callable[[ClientConfig, int], ChannelWorker] = ChannelWorker,
    ) -> None:
        self.config = config
        self._worker_factory = worker_factory

    def run(self) -> RunReport:
        """Run every channel to completion and build the report.

        Returns:
            RunReport with summed metrics over the channels that finished.
        """
        channels = self.config.channels
        logger.info(
            "Starting %d channel(s) to %s:%d, %d message(s) of %d bytes each",
            channels,
            self.config.host,
            self.config.port,
            self.config.messages_per_channel,
            self.config.msg_length,
        )

        start = time.perf_counter()
        with ThreadPoolExecutor(
            max_workers=channels,
            thread_name_prefix="netgap-channel",
        ) as pool:
            futures = [
                pool.submit(self._worker_factory(self.config, channel_id).run)
                for channel_id in range(channels)
            ]
        elapsed = time.perf_counter() - start

        results: list[ChannelResult] = []
        failures: list[tuple[int, str]] = []
        for channel_id, future in enumerate(futures):
            result = _join(channel_id, future, failures)
            if result is not None:
                results.append(result)

        metrics = Metrics.combine(r.metrics for r in results)
        latency = LatencyHistogram.combine(r.latency for r in results)
        report = RunReport(
            metrics=metrics,
            elapsed_seconds=elapsed,
            channels=channels,
            connected_channels=sum(1 for r in results if r.connected),
            completed_channels=len(results),
            failed_channels=failures,
            latency=latency.summary(),
        )
        logger.info("Run finished in %.3fs: %s", elapsed, metrics)
        return report


def _join(
    channel_id: int,
    future: Future[ChannelResult],
    failures: list[tuple[int, str]],
) -> ChannelResult | None:
    try:
        return future.result()
    except ChannelError as exc:
        logger.error("Channel %d aborted: %s (partial %s)", channel_id, exc, exc.metrics)  # noqa: TRY400
        failures.append((channel_id, str(exc)))
    except Exception as exc:
        logger.exception("Channel %d terminated abnormally", channel_id)
        failures.append((channel_id, f"{type(exc).__name__}: {exc}"))
    return None
