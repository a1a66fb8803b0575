"""Pytest configuration for the cephsource test suite."""

import copy
import os

import pytest

# Ensure test environment variables are set before any imports
os.environ.setdefault("CEPHSOURCE_LOG_LEVEL", "warning")

from cephsource.errors import SinkRejectedError  # noqa: E402
from cephsource.sinks.base import DeliveryResult, Sink  # noqa: E402

SAMPLE_RECORD = {
    "eventVersion": "2.2",
    "eventSource": "ceph:s3",
    "awsRegion": "us-east-1",
    "eventTime": "2021-01-01T00:00:00Z",
    "eventName": "ObjectCreated:Put",
    "userIdentity": {"principalId": "tester"},
    "requestParameters": {"sourceIPAddress": ""},
    "responseElements": {
        "x-amz-request-id": "abc",
        "x-amz-id-2": "123",
    },
    "s3": {
        "s3SchemaVersion": "1.0",
        "configurationId": "notif1",
        "bucket": {
            "name": "mybucket",
            "ownerIdentity": {"principalId": "tester"},
            "arn": "arn:aws:s3:::mybucket",
            "id": "",
        },
        "object": {
            "key": "file.txt",
            "size": 11,
            "eTag": "5eb63bbbe01eeed093cb22bb8f5acdc3",
            "versionId": "",
            "sequencer": "F7E6F15F2D2B4E1A",
            "metadata": [],
            "tags": [],
        },
    },
    "eventId": "1609459200.000000.5eb63bbbe01eeed093cb22bb8f5acdc3",
    "opaqueData": "",
}


def make_record(**overrides):
    """Copy of SAMPLE_RECORD with top-level keys replaced."""
    record = copy.deepcopy(SAMPLE_RECORD)
    record.update(overrides)
    return record


class RecordingSink(Sink):
    """In-memory sink that records every send.

    Sends whose 1-based position is in ``reject_at`` are refused.
    """

    def __init__(self, reject_at=()):
        super().__init__(target="memory://")
        self.reject_at = set(reject_at)
        self.sent = []
        self.tags = []
        self.closed = False

    @property
    def sink_type(self):
        return "memory"

    async def send(self, envelope, tag):
        self.sent.append(envelope)
        self.tags.append(tag)
        if len(self.sent) in self.reject_at:
            result = DeliveryResult.nack(SinkRejectedError(503, "sink unavailable"), 503)
        else:
            result = DeliveryResult.ack(202)
        self._record_delivery(tag, result)
        return result

    async def close(self):
        self.closed = True


@pytest.fixture
def sample_record():
    return copy.deepcopy(SAMPLE_RECORD)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def sink_factory():
    return RecordingSink
