"""Notification batch processing.

Decodes a request body into bucket notifications and pushes each one
through mapping and delivery, in the order received.

Processing is fail-fast: the first record that cannot be mapped or
delivered ends the batch and its error is raised. Records before it
have already been delivered and stay delivered, so a batch is neither
atomic nor safe to resubmit without duplicates downstream.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from cephsource.delivery import DeliveryClient
from cephsource.errors import MalformedPayloadError
from cephsource.mapping import to_envelope
from cephsource.models.notifications import NotificationBatch

logger = logging.getLogger("cephsource.processor")


def decode_batch(raw_body: bytes) -> NotificationBatch:
    """Decode a request body into a notification batch.

    Raises:
        MalformedPayloadError: body is not UTF-8 JSON of the expected shape.
    """
    try:
        payload: Any = json.loads(raw_body)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedPayloadError(f"failed to parse JSON: {e}") from e

    try:
        return NotificationBatch.model_validate(payload)
    except ValidationError as e:
        raise MalformedPayloadError(f"invalid notification batch: {e}") from e


class BatchProcessor:
    """Map and deliver every record of a notification batch."""

    def __init__(self, delivery: DeliveryClient):
        self.delivery = delivery

    async def process(self, raw_body: bytes) -> None:
        """Process one request body.

        Returns normally only when every record was mapped and delivered.

        Raises:
            MalformedPayloadError: nothing was processed.
            SerializationError: a record could not be encoded; the batch
                stopped at that record.
            DeliveryError: the sink refused a record; the batch stopped
                at that record.
        """
        batch = decode_batch(raw_body)
        logger.debug("%d events found in message", batch.size)

        for record in batch.records:
            logger.debug("Received Ceph bucket notification: %s", record.event_name)
            envelope = to_envelope(record)
            await self.delivery.send(envelope)
