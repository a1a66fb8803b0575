"""Tests for notification and envelope models."""

from datetime import datetime, timedelta, timezone

import pydantic
import pytest

from cephsource.models.events import EventEnvelope
from cephsource.models.notifications import BucketNotification, NotificationBatch


class TestBucketNotification:

    def test_aliases_resolve(self, sample_record):
        n = BucketNotification.model_validate(sample_record)
        assert n.event_name == "ObjectCreated:Put"
        assert n.aws_region == "us-east-1"
        assert n.response_elements.request_id == "abc"
        assert n.response_elements.id_2 == "123"
        assert n.s3.bucket.name == "mybucket"
        assert n.s3.object.key == "file.txt"
        assert n.s3.object.size == 11

    def test_everything_optional(self):
        n = BucketNotification.model_validate({})
        assert n.event_time == ""
        assert n.s3.object.key == ""

    def test_payload_keeps_wire_names(self, sample_record):
        payload = BucketNotification.model_validate(sample_record).to_payload()
        assert payload["responseElements"]["x-amz-request-id"] == "abc"
        assert "response_elements" not in payload

    def test_object_tags(self, record_factory):
        raw = record_factory()
        raw["s3"]["object"]["tags"] = [{"key": "team", "val": "storage"}]
        n = BucketNotification.model_validate(raw)
        assert n.s3.object.tags[0].val == "storage"

    def test_negative_size_rejected(self, record_factory):
        raw = record_factory()
        raw["s3"]["object"]["size"] = -1
        with pytest.raises(pydantic.ValidationError):
            BucketNotification.model_validate(raw)


def test_batch_preserves_order(record_factory):
    batch = NotificationBatch.model_validate(
        {"Records": [record_factory(eventName=n) for n in ("a", "b", "c")]}
    )
    assert batch.size == 3
    assert [r.event_name for r in batch.records] == ["a", "b", "c"]


class TestEventEnvelope:

    def test_frozen(self):
        env = EventEnvelope(id="a", source="s", type="t")
        with pytest.raises(pydantic.ValidationError):
            env.id = "b"

    def test_missing_attributes(self):
        assert EventEnvelope(id="", source="s", type="").missing_attributes() == ["id", "type"]
        assert EventEnvelope(id="a", source="s", type="t").missing_attributes() == []

    def test_with_extensions_merges(self):
        env = EventEnvelope(id="a", source="s", type="t", extensions={"a": "1", "b": "2"})
        merged = env.with_extensions({"b": "3"})
        assert merged.extensions == {"a": "1", "b": "3"}
        assert env.extensions == {"a": "1", "b": "2"}
        assert env.with_extensions({}) is env

    def test_formatted_time_is_utc(self):
        tz = timezone(timedelta(hours=2))
        env = EventEnvelope(id="a", source="s", type="t", time=datetime(2021, 1, 1, 2, tzinfo=tz))
        assert env.formatted_time() == "2021-01-01T00:00:00Z"


class TestNullValues:
    """JSON null decodes to the field's empty value."""

    def test_null_scalar_field(self, record_factory):
        n = BucketNotification.model_validate(record_factory(opaqueData=None, eventName=None))
        assert n.opaque_data == ""
        assert n.event_name == ""

    def test_null_nested_part(self, record_factory):
        n = BucketNotification.model_validate(record_factory(responseElements=None))
        assert n.response_elements.request_id == ""

    def test_null_size_and_lists(self, record_factory):
        raw = record_factory()
        raw["s3"]["object"].update(size=None, metadata=None, tags=[None])
        n = BucketNotification.model_validate(raw)
        assert n.s3.object.size == 0
        assert n.s3.object.metadata == []
        assert n.s3.object.tags[0].key == ""

    def test_null_records_and_batch(self):
        assert NotificationBatch.model_validate({"Records": None}).size == 0
        assert NotificationBatch.model_validate(None).size == 0
        assert NotificationBatch.model_validate({"Records": [None]}).size == 1
