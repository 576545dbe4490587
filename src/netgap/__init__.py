"""netgap — a TCP throughput and reliability probe."""

from __future__ import annotations

from netgap._internal.config import ClientConfig, ServerConfig
from netgap.client.orchestrator import ClientOrchestrator
from netgap.client.worker import ChannelWorker
from netgap.metrics.models import ChannelResult, Metrics, RunReport
from netgap.protocol import AckResult
from netgap.server.handler import ConnectionHandler, HandlerOutcome
from netgap.server.listener import Listener

__version__ = "0.1.0"

__all__ = [
    "AckResult",
    "ChannelResult",
    "ChannelWorker",
    "ClientConfig",
    "ClientOrchestrator",
    "ConnectionHandler",
    "HandlerOutcome",
    "Listener",
    "Metrics",
    "RunReport",
    "ServerConfig",
]
