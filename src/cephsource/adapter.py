"""Receive adapter lifecycle.

Wires sink, delivery, batch processing and the HTTP application for one
adapter instance, and runs the listener until asked to stop. uvicorn
turns SIGINT/SIGTERM into a graceful shutdown; stop() does the same
programmatically.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
import uvicorn

from cephsource.config import Settings
from cephsource.delivery import DeliveryClient
from cephsource.errors import ConfigError
from cephsource.ingress import create_app
from cephsource.processor import BatchProcessor
from cephsource.sinks.base import Sink
from cephsource.sinks.http import HttpSink

logger = logging.getLogger("cephsource.adapter")


def validate_sink_uri(uri: str) -> str:
    """Check K_SINK is an absolute http(s) URL.

    Raises:
        ConfigError: the URI is missing or unusable.
    """
    if not uri:
        raise ConfigError("K_SINK is not set; no sink to deliver to")
    try:
        url = httpx.URL(uri)
    except httpx.InvalidURL as e:
        raise ConfigError(f"K_SINK {uri!r} is not a valid URL: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigError(f"K_SINK {uri!r} must be an absolute http(s) URL")
    return uri


class ReceiveAdapter:
    """Converts incoming Ceph notifications to CloudEvents for a sink."""

    def __init__(self, settings: Settings, sink: Optional[Sink] = None):
        if sink is None:
            sink = HttpSink(
                validate_sink_uri(settings.sink_uri),
                timeout=settings.sink_timeout,
            )

        self.settings = settings
        self.sink = sink
        self.delivery = DeliveryClient(
            sink,
            name=settings.name,
            namespace=settings.namespace,
            extensions=settings.ce_overrides,
        )
        self.processor = BatchProcessor(self.delivery)
        self.app = create_app(self.processor, health=sink.health)
        self._server: uvicorn.Server | None = None

    @property
    def started(self) -> bool:
        return self._server is not None and self._server.started

    async def start(self, host: str = "0.0.0.0") -> None:
        """Serve notifications until the server is told to exit."""
        config = uvicorn.Config(
            self.app,
            host=host,
            port=self.settings.port,
            log_config=None,
        )
        self._server = uvicorn.Server(config)
        logger.info(
            "Ceph to CloudEvents adapter spawned HTTP server on port: %s",
            self.settings.port,
        )
        try:
            await self._server.serve()
        finally:
            await self.sink.close()
            logger.info("Ceph to CloudEvents adapter terminated")

    def stop(self) -> None:
        """Ask the listener to stop accepting requests and drain."""
        if self._server is not None:
            self._server.should_exit = True
