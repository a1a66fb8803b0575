"""HTTP ingress for bucket notifications.

Each adapter builds its own FastAPI application, so several adapters
(or test instances) can live in one process. Notifications are accepted
on any path except /health, and only with POST; every other verb gets a
405 naming POST as the allowed method. Any failure in the batch comes
back as a 400 whose body is the error text.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.requests import ClientDisconnect

from cephsource import __version__
from cephsource.errors import BridgeError
from cephsource.processor import BatchProcessor
from cephsource.sinks.base import SinkHealth

logger = logging.getLogger("cephsource.ingress")

ALLOWED_METHOD = "POST"


def _bad_request(message: str) -> PlainTextResponse:
    return PlainTextResponse(
        message, status_code=400, headers={"Allow": ALLOWED_METHOD}
    )


def create_app(
    processor: BatchProcessor,
    health: Optional[Callable[[], SinkHealth]] = None,
) -> FastAPI:
    """Build the notification receiver application.

    Args:
        processor: Batch processor bound to this adapter's sink.
        health: Optional callable reporting sink health for /health.
    """
    app = FastAPI(
        title="cephsource",
        description="Ceph bucket notifications to CloudEvents",
        version=__version__,
    )

    @app.get("/health")
    async def health_check():
        report = {"status": "ok", "version": __version__}
        if health is not None:
            report["sink"] = dataclasses.asdict(health())
        return report

    async def receive_notifications(request: Request) -> Response:
        if request.method != ALLOWED_METHOD:
            logger.info("%s method not allowed", request.method)
            return PlainTextResponse(
                "405 Method Not Allowed",
                status_code=405,
                headers={"Allow": ALLOWED_METHOD},
            )

        try:
            body = await request.body()
        except ClientDisconnect as e:
            logger.info("Error reading message body: %r", e)
            return _bad_request(str(e) or "client disconnected while sending body")

        try:
            await processor.process(body)
        except BridgeError as e:
            logger.info("Rejected notification batch: %s", e)
            return _bad_request(str(e))

        return Response(status_code=200, headers={"Allow": ALLOWED_METHOD})

    # No method filter: the handler answers every verb itself.
    app.add_route(
        "/{path:path}", receive_notifications, include_in_schema=False
    )

    return app
