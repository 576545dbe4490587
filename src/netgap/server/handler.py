"""Per-connection read/acknowledge loop of the probe server."""

from __future__ import annotations

import contextlib
import socket
import threading
from enum import Enum
from typing import TYPE_CHECKING

from netgap._internal.logging import get_logger
from netgap.protocol import encode

if TYPE_CHECKING:
    from netgap._internal.config import ServerConfig

logger = get_logger("server.handler")


class HandlerOutcome(Enum):
    """Lifecycle state of a ConnectionHandler."""

    RUNNING = "running"
    PEER_CLOSED = "peer_closed"
    ERROR = "error"


class ConnectionHandler:
    """Services exactly one accepted connection until it closes or errors.

    Every non-empty read counts as one message. When acks are enabled the
    handler answers each read with the success byte. A zero-length read is
    an orderly close by the peer. A failed read is answered with a
    best-effort failure byte before the connection is dropped.

    The socket is owned by the handler and is always closed when
    :meth:`serve` returns.

    Attributes:
        peer: Remote ``(host, port)`` of the connection.
        outcome: RUNNING until :meth:`serve` returns, then the terminal state.
    """

    def __init__(
        self,
        conn: socket.socket,
        config: ServerConfig,
        peer: tuple[str, int] | None = None,
    ) -> None:
        self._conn = conn
        self._config = config
        self.peer = peer
        self.outcome = HandlerOutcome.RUNNING
        self._finished = threading.Event()

        self._messages_received = 0
        self._bytes_received = 0
        self._acks_sent = 0
        self._last_received_size = 0

    @property
    def messages_received(self) -> int:
        return self._messages_received

    @property
    def bytes_received(self) -> int:
        return self._bytes_received

    @property
    def acks_sent(self) -> int:
        return self._acks_sent

    @property
    def last_received_size(self) -> int:
        return self._last_received_size

    def wait(self, timeout: float | None = None) -> bool:
        """Block until :meth:`serve` has returned.

        Returns:
            True if the handler finished within ``timeout``.
        """
        return self._finished.wait(timeout)

    def serve(self) -> HandlerOutcome:
        """Run the read loop until the peer closes or an I/O error occurs.

        Returns:
            PEER_CLOSED or ERROR.
        """
        try:
            self.outcome = self._read_loop()
        finally:
            self._close()
            self._finished.set()
        return self.outcome

    def _read_loop(self) -> HandlerOutcome:
        while True:
            try:
                data = self._conn.recv(self._config.recv_buffer_size)
            except OSError as exc:
                logger.warning("Failed to read from %s: %s", self.peer, exc)
                self._send_failure_ack()
                return HandlerOutcome.ERROR

            if not data:
                logger.info("Connection closed by %s", self.peer)
                return HandlerOutcome.PEER_CLOSED

            size = len(data)
            self._messages_received += 1
            self._bytes_received += size
            self._last_received_size = size
            logger.debug("Received size: %d from %s", size, self.peer)

            if not self._config.ack_enabled:
                continue

            try:
                self._conn.sendall(encode(True))
            except OSError as exc:
                logger.warning("Failed to write ack to %s: %s", self.peer, exc)
                return HandlerOutcome.ERROR
            self._acks_sent += 1

    def _send_failure_ack(self) -> None:
        try:
            self._conn.sendall(encode(False))
        except OSError as exc:
            logger.debug("Failure ack to %s not delivered: %s", self.peer, exc)

    def _close(self) -> None:
        with contextlib.suppress(OSError):
            self._conn.shutdown(socket.SHUT_RDWR)
        self._conn.close()
