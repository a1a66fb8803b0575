"""Envelope delivery.

Wraps a sink with the adapter's identity. Every send is tagged with the
adapter name, namespace and resource group, and a negative
acknowledgement becomes a DeliveryError. There is no retry here: one
send() is exactly one sink round trip.
"""

from __future__ import annotations

import logging
from typing import Optional

from cephsource.errors import DeliveryError
from cephsource.models.events import EventEnvelope
from cephsource.sinks.base import MetricTag, Sink

logger = logging.getLogger("cephsource.delivery")


class DeliveryClient:
    """Send envelopes to a sink on behalf of one adapter instance."""

    def __init__(
        self,
        sink: Sink,
        name: str,
        namespace: str,
        extensions: Optional[dict[str, str]] = None,
    ):
        self.sink = sink
        self.name = name
        self.namespace = namespace
        self.extensions = dict(extensions or {})

    def metric_tag(self) -> MetricTag:
        return MetricTag(name=self.name, namespace=self.namespace)

    async def send(self, envelope: EventEnvelope) -> None:
        """Deliver one envelope.

        Raises:
            DeliveryError: the sink rejected the envelope or failed to
                acknowledge it. The sink's cause is attached.
        """
        envelope = envelope.with_extensions(self.extensions)
        logger.debug(
            "sending cloudevent id: %s, source: %s, subject: %s",
            envelope.id, envelope.source, envelope.subject,
        )

        result = await self.sink.send(envelope, self.metric_tag())
        if not result.accepted:
            logger.error(
                "failed to send cloudevent: %s", result.cause,
                extra={
                    "event_id": envelope.id,
                    "source": envelope.source,
                    "subject": envelope.subject,
                },
            )
            raise DeliveryError(envelope.id, result.cause)

        logger.debug(
            "cloudevent sent id: %s, source: %s, subject: %s",
            envelope.id, envelope.source, envelope.subject,
        )
