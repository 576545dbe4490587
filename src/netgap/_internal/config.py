"""Server and client configuration for netgap.

Both configs are frozen dataclasses. A single instance is shared read-only
by every connection handler or channel worker spawned from it.
"""

from __future__ import annotations

from dataclasses import dataclass

from netgap._internal.errors import ConfigError

DEFAULT_PORT = 8899
DEFAULT_MSG_LENGTH = 996

_MAX_PORT = 65535


def _require(condition: bool, msg: str) -> None:
    if not condition:
        raise ConfigError(msg)


@dataclass(frozen=True)
class ServerConfig:
    """Listener configuration.

    Attributes:
        port: TCP port to bind. 0 binds an ephemeral port.
        ack_enabled: Whether each received read is acknowledged.
        host: Interface address to bind.
        recv_buffer_size: Maximum bytes taken per read.
        backlog: Pending-connection queue length passed to ``listen()``.
    """

    port: int = DEFAULT_PORT
    ack_enabled: bool = True
    host: str = "0.0.0.0"  # noqa: S104
    recv_buffer_size: int = 65536
    backlog: int = 128

    def validate(self) -> ServerConfig:
        """Check every field, returning self so calls can be chained.

        Raises:
            ConfigError: If a field holds an invalid value.
        """
        _require(0 <= self.port <= _MAX_PORT, f"port must be in 0..{_MAX_PORT}, got: {self.port}")
        _require(bool(self.host), "host must not be empty")
        _require(
            self.recv_buffer_size >= 1,
            f"recv_buffer_size must be >= 1, got: {self.recv_buffer_size}",
        )
        _require(self.backlog >= 1, f"backlog must be >= 1, got: {self.backlog}")
        return self


@dataclass(frozen=True)
class ClientConfig:
    """Probe client configuration.

    Attributes:
        host: Server host name or address.
        port: Server TCP port.
        channels: Number of concurrent connections.
        msg_total: Message budget across all channels.
        msg_length: Size of each zero-filled message in bytes.
        msg_interval_ms: Pause after each message, per channel.
        read_timeout_ms: Upper bound on the wait for each ack byte.
    """

    host: str
    port: int = DEFAULT_PORT
    channels: int = 1
    msg_total: int = 10
    msg_length: int = DEFAULT_MSG_LENGTH
    msg_interval_ms: int = 1000
    read_timeout_ms: int = 1000

    @property
    def messages_per_channel(self) -> int:
        """Each channel's share of the budget; the remainder is not sent."""
        return self.msg_total // self.channels

    @property
    def interval_seconds(self) -> float:
        """Pause after each message, in seconds."""
        return self.msg_interval_ms / 1000.0

    @property
    def read_timeout_seconds(self) -> float:
        """Ack read timeout, in seconds, as passed to ``settimeout``."""
        return self.read_timeout_ms / 1000.0

    def validate(self) -> ClientConfig:
        """Check every field, returning self so calls can be chained.

        Raises:
            ConfigError: If a field holds an invalid value.
        """
        _require(bool(self.host), "host must not be empty")
        _require(1 <= self.port <= _MAX_PORT, f"port must be in 1..{_MAX_PORT}, got: {self.port}")
        _require(self.channels >= 1, f"channels must be >= 1, got: {self.channels}")
        _require(self.msg_total >= 0, f"msg_total must be >= 0, got: {self.msg_total}")
        _require(self.msg_length >= 1, f"msg_length must be >= 1, got: {self.msg_length}")
        _require(
            self.msg_interval_ms >= 0,
            f"msg_interval_ms must be >= 0, got: {self.msg_interval_ms}",
        )
        _require(
            self.read_timeout_ms >= 1,
            f"read_timeout_ms must be >= 1, got: {self.read_timeout_ms}",
        )
        return self
