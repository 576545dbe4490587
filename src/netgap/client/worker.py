"""Single-connection send/ack loop of the probe client."""

from __future__ import annotations

import socket
import time
from typing import TYPE_CHECKING

from netgap._internal.errors import ChannelError
from netgap._internal.logging import get_logger
from netgap.metrics.histogram import LatencyHistogram
from netgap.metrics.models import ChannelResult, Metrics
from netgap.protocol import AckResult, decode

if TYPE_CHECKING:
    from netgap._internal.config import ClientConfig

logger = get_logger("client.worker")


class ChannelWorker:
    """Owns one outbound connection and sends its share of the budget.

    Sends are strictly sequential: message N+1 is written only after the
    ack for message N was read, rejected, or timed out. Only the ack read
    is time-bounded; connect and write use the OS defaults.

    Attributes:
        config: Client configuration shared by all channels.
        channel_id: Zero-based channel index, used in logs and results.
        message_count: Number of messages this channel sends.
    """

    def __init__(
        self,
        config: ClientConfig,
        channel_id: int = 0,
        *,
        message_count: int | None = None,
    ) -> None:
        self.config = config
        self.channel_id = channel_id
        self.message_count = (
            message_count if message_count is not None else config.messages_per_channel
        )

    def run(self) -> ChannelResult:
        """Connect, run the send loop, and return the channel's counters.

        Returns:
            ChannelResult. When the connection cannot be opened the result
            has ``connected=False`` and zero-valued metrics.

        Raises:
            ChannelError: If a write fails. The channel stops immediately.
        """
        metrics = Metrics()
        latency = LatencyHistogram()
        host, port = self.config.host, self.config.port

        try:
            conn = socket.create_connection((host, port))
        except OSError as exc:
            logger.warning(
                "Channel %d: failed to connect to the server %s:%d: %s",
                self.channel_id,
                host,
                port,
                exc,
            )
            return ChannelResult(self.channel_id, connected=False, metrics=metrics, latency=latency)

        logger.info("Channel %d: connected to the server %s:%d", self.channel_id, host, port)
        with conn:
            conn.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            self._send_loop(conn, metrics, latency)

        logger.debug("Channel %d: finished with %s", self.channel_id, metrics)
        return ChannelResult(self.channel_id, connected=True, metrics=metrics, latency=latency)

    def _send_loop(
        self,
        conn: socket.socket,
        metrics: Metrics,
        latency: LatencyHistogram,
    ) -> None:
        message = bytes(self.config.msg_length)
        interval = self.config.interval_seconds

        while metrics.total < self.message_count:
            metrics.total += 1

            sent_at = time.perf_counter()
            try:
                conn.settimeout(None)
                conn.sendall(message)
            except OSError as exc:
                msg = f"channel {self.channel_id}: failed to write data to the server: {exc}"
                raise ChannelError(msg, channel_id=self.channel_id, metrics=metrics) from exc
            metrics.bytes += len(message)

            result = self._read_ack(conn)
            if result is AckResult.SUCCESS:
                metrics.success += 1
            elif result is AckResult.FAILURE:
                metrics.failed += 1
            if result in (AckResult.SUCCESS, AckResult.FAILURE):
                latency.record_ms((time.perf_counter() - sent_at) * 1000.0)

            if interval > 0:
                time.sleep(interval)

    def _read_ack(self, conn: socket.socket) -> AckResult | None:
        """Read one ack byte; None when no byte arrived in time."""
        try:
            conn.settimeout(self.config.read_timeout_seconds)
            frame = conn.recv(1)
        except TimeoutError:
            logger.warning(
                "Channel %d: no ack within %d ms",
                self.channel_id,
                self.config.read_timeout_ms,
            )
            return None
        except OSError as exc:
            logger.warning("Channel %d: failed to read ack: %s", self.channel_id, exc)
            return None

        if not frame:
            logger.warning("Channel %d: failed to read ack: connection closed", self.channel_id)
            return None

        result = decode(frame)
        if result is AckResult.UNKNOWN:
            logger.warning("Channel %d: unknown ack: %#04x", self.channel_id, frame[0])
        return result
