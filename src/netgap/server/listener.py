"""TCP listener that spawns one handler thread per accepted connection."""

from __future__ import annotations

import contextlib
import socket
import threading
from typing import TYPE_CHECKING

from netgap._internal.errors import ListenerError
from netgap._internal.logging import get_logger
from netgap.server.handler import ConnectionHandler

if TYPE_CHECKING:
    from types import TracebackType

    from netgap._internal.config import ServerConfig

logger = get_logger("server.listener")

# accept() wakes up this often to notice close()
_ACCEPT_POLL_SECONDS = 0.5


class Listener:
    """Binds a port and accepts connections until closed.

    Each accepted connection gets its own :class:`ConnectionHandler`
    running on a daemon thread. Handlers share nothing but the frozen
    server config. There is no graceful drain: closing the listener stops
    accepting, and in-flight handlers keep running until their peers go.

    An ``accept()`` failure while the listener is open ends the loop with
    :class:`ListenerError`.

    Attributes:
        config: Server configuration shared by every handler.
        handlers: Live handlers in accept order. Finished ones are dropped
            on the next accept.
        connections_accepted: Connections accepted since construction.
    """

    def __init__(self, config: ServerConfig) -> None:
        self.config = config
        self.handlers: list[ConnectionHandler] = []
        self.connections_accepted = 0
        self._sock: socket.socket | None = None
        self._closed = threading.Event()

    @property
    def address(self) -> tuple[str, int]:
        """The bound ``(host, port)``; the real port when bound to 0.

        Raises:
            ListenerError: If the listener is not bound.
        """
        if self._sock is None:
            msg = "listener is not bound"
            raise ListenerError(msg)
        return _sockname(self._sock)

    def bind(self) -> tuple[str, int]:
        """Bind and start listening, replacing any socket bound earlier.

        Returns:
            The bound address.

        Raises:
            ListenerError: If the address cannot be bound.
        """
        return _sockname(self._listen())

    def serve_forever(self) -> None:
        """Accept connections until :meth:`close` is called.

        Binds first if :meth:`bind` has not been called. Returns at once
        if the listener was closed before serving; :meth:`bind` reopens it.

        Raises:
            ListenerError: On bind failure, or if ``accept()`` fails while
                the listener is open.
        """
        if self._closed.is_set():
            logger.debug("Listener closed before serving")
            return
        sock = self._sock if self._sock is not None else self._listen()

        host, port = _sockname(sock)
        logger.info(
            "Server started at %s:%d (ack %s)",
            host,
            port,
            "enabled" if self.config.ack_enabled else "disabled",
        )

        while not self._closed.is_set():
            try:
                conn, peer = sock.accept()
            except TimeoutError:
                continue
            except OSError as exc:
                if self._closed.is_set():
                    break
                msg = f"failed to accept connection: {exc}"
                raise ListenerError(msg) from exc
            self._spawn(conn, peer)

        logger.info("Server on %s:%d stopped accepting", host, port)

    def close(self) -> None:
        """Stop accepting and release the listening socket. Safe from any thread."""
        self._closed.set()
        sock, self._sock = self._sock, None
        if sock is not None:
            with contextlib.suppress(OSError):
                sock.close()

    def _listen(self) -> socket.socket:
        host, port = self.config.host, self.config.port
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
            sock.listen(self.config.backlog)
        except OSError as exc:
            sock.close()
            msg = f"failed to bind to {host}:{port}: {exc}"
            raise ListenerError(msg) from exc

        sock.settimeout(_ACCEPT_POLL_SECONDS)
        if self._sock is not None:
            self._sock.close()
        self._sock = sock
        self._closed.clear()
        return sock

    def _spawn(self, conn: socket.socket, peer: tuple[str, int]) -> None:
        conn.setblocking(True)
        logger.info("New connection: %s:%d", peer[0], peer[1])
        handler = ConnectionHandler(conn, self.config, peer=peer)
        # finished handlers have closed their sockets; release them
        self.handlers = [h for h in self.handlers if not h.wait(0)]
        self.handlers.append(handler)
        self.connections_accepted += 1
        thread = threading.Thread(
            target=handler.serve,
            name=f"netgap-conn-{peer[0]}:{peer[1]}",
            daemon=True,
        )
        thread.start()

    def __enter__(self) -> Listener:
        if self._sock is None:
            self.bind()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def _sockname(sock: socket.socket) -> tuple[str, int]:
    host, port = sock.getsockname()[:2]
    return host, port
