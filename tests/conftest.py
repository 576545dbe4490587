"""Shared test fixtures for the netgap test suite."""

from __future__ import annotations

import logging
import socket
import struct
import threading
from typing import TYPE_CHECKING

import pytest

from netgap._internal.config import ServerConfig
from netgap.server.listener import Listener

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


@pytest.fixture(autouse=True)
def _reset_netgap_logger() -> Iterator[None]:
    """Drop handlers installed by setup_logging so streams don't leak across tests."""
    yield
    logger = logging.getLogger("netgap")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Network utilities
# =============================================================================


def _get_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


def _start_listener(ack_enabled: bool) -> tuple[Listener, threading.Thread]:
    listener = Listener(ServerConfig(port=0, ack_enabled=ack_enabled, host="127.0.0.1"))
    listener.bind()
    thread = threading.Thread(target=listener.serve_forever, daemon=True)
    thread.start()
    return listener, thread


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def free_port() -> int:
    """A port with nothing listening on it."""
    return _get_free_port()


@pytest.fixture
def ack_server() -> Iterator[Listener]:
    """Listener with acks enabled, serving on an ephemeral loopback port."""
    listener, thread = _start_listener(ack_enabled=True)
    yield listener
    listener.close()
    thread.join(timeout=5.0)


@pytest.fixture
def no_ack_server() -> Iterator[Listener]:
    """Listener with acks disabled, serving on an ephemeral loopback port."""
    listener, thread = _start_listener(ack_enabled=False)
    yield listener
    listener.close()
    thread.join(timeout=5.0)


@pytest.fixture
def reply_server() -> Iterator[Callable[[bytes | None], int]]:
    """Factory for a one-connection server that answers every read with fixed bytes.

    Passing ``None`` makes the server reset the connection right after accept.
    Returns the bound port.
    """
    sockets: list[socket.socket] = []
    threads: list[threading.Thread] = []

    def _factory(reply: bytes | None) -> int:
        srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        srv.bind(("127.0.0.1", 0))
        srv.listen(1)
        srv.settimeout(5.0)
        sockets.append(srv)

        def _serve() -> None:
            try:
                conn, _ = srv.accept()
            except OSError:
                return
            with conn:
                if reply is None:
                    # Linger 0 turns close() into a RST
                    conn.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))
                    return
                while True:
                    try:
                        data = conn.recv(65536)
                    except OSError:
                        return
                    if not data:
                        return
                    try:
                        conn.sendall(reply)
                    except OSError:
                        return

        thread = threading.Thread(target=_serve, daemon=True)
        thread.start()
        threads.append(thread)
        return srv.getsockname()[1]

    yield _factory

    for srv in sockets:
        srv.close()
    for thread in threads:
        thread.join(timeout=5.0)
