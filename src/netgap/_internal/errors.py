"""Custom exception hierarchy for netgap."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from netgap.metrics.models import Metrics


class NetgapError(Exception):
    """Base exception for all netgap errors.

    All custom exceptions in netgap inherit from this class, making it
    easy to catch any netgap-specific error with a single except clause.
    """


class ConfigError(NetgapError):
    """Raised when a server or client configuration value is invalid.

    Examples:
        - Port outside the valid range.
        - Zero channels or a non-positive message length.
    """


class ListenerError(NetgapError):
    """Raised when the server listener cannot bind or stops accepting.

    Examples:
        - The port is already in use.
        - ``accept()`` fails while the listener is still open.
    """


class ChannelError(NetgapError):
    """Raised when a client channel aborts on a write failure.

    The metrics gathered before the abort are attached for diagnostics.
    They are not part of the run aggregate.

    Attributes:
        channel_id: Identifier of the channel that aborted.
        metrics: Counters accumulated up to the failed write.
    """

    def __init__(self, message: str, *, channel_id: int, metrics: Metrics) -> None:
        super().__init__(message)
        self.channel_id = channel_id
        self.metrics = metrics
