"""Bucket notification to event envelope mapping.

Pure translation, no I/O. Each notification record produces exactly one
envelope:

    id       request id + host id (x-amz-request-id, x-amz-id-2)
    source   {eventSource}.{awsRegion}.{bucket name}
    type     com.amazonaws.{eventName}
    subject  object key
    time     eventTime, or the current time when it does not parse
    data     the whole record as JSON

An unparsable timestamp is logged and replaced, it never fails the
record. Only a record that cannot be encoded as JSON is rejected.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic_core import PydanticSerializationError

from cephsource.errors import SerializationError
from cephsource.models.events import EventEnvelope
from cephsource.models.notifications import BucketNotification

logger = logging.getLogger("cephsource.mapping")

EVENT_TYPE_PREFIX = "com.amazonaws"
DATA_CONTENT_TYPE = "application/json"

_RFC3339 = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})$"
)


def parse_event_time(value: str) -> datetime:
    """Parse an RFC 3339 timestamp strictly.

    Raises:
        ValueError: when the value is not an RFC 3339 date-time.
    """
    if not _RFC3339.match(value):
        raise ValueError(f"{value!r} is not an RFC 3339 timestamp")
    return datetime.fromisoformat(value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_envelope(
    record: BucketNotification,
    now: Optional[Callable[[], datetime]] = None,
) -> EventEnvelope:
    """Convert one bucket notification into an event envelope.

    Args:
        record: Validated notification record.
        now: Clock used for the timestamp fallback (default: UTC now).

    Returns:
        The envelope for this record.

    Raises:
        SerializationError: the record cannot be encoded as event data.
    """
    clock = now or _utcnow
    try:
        event_time = parse_event_time(record.event_time)
    except ValueError as e:
        logger.info(
            "Failed to parse event timestamp, using local time. Error: %s", e
        )
        event_time = clock()

    try:
        data = json.dumps(record.to_payload()).encode("utf-8")
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise SerializationError(f"failed to marshal event data: {e}") from e

    elements = record.response_elements
    return EventEnvelope(
        id=elements.request_id + elements.id_2,
        source=".".join(
            (record.event_source, record.aws_region, record.s3.bucket.name)
        ),
        type=f"{EVENT_TYPE_PREFIX}.{record.event_name}",
        subject=record.s3.object.key,
        time=event_time,
        datacontenttype=DATA_CONTENT_TYPE,
        data=data,
    )
