"""Bucket notification records as sent by Ceph RGW.

The schema follows the S3 event notification format. Every field is
optional and falls back to an empty value, so a record only fails to
load when a field has the wrong JSON type. Fields this model does not
know about are kept, since the whole record travels as event data.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)


class _NotificationPart(BaseModel):
    """JSON null decodes to the empty value, for parts and fields alike."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _null_part(cls, data: Any) -> Any:
        return {} if data is None else data

    @field_validator("*", mode="before")
    @classmethod
    def _null_field(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            field_info = cls.model_fields[info.field_name]
            return field_info.get_default(call_default_factory=True)
        return value


class UserIdentity(_NotificationPart):
    principal_id: str = Field(default="", alias="principalId")


class RequestParameters(_NotificationPart):
    source_ip_address: str = Field(default="", alias="sourceIPAddress")


class ResponseElements(_NotificationPart):
    """Correlation ids assigned by the gateway to the originating request."""
    request_id: str = Field(default="", alias="x-amz-request-id")
    id_2: str = Field(default="", alias="x-amz-id-2")


class KeyValue(_NotificationPart):
    key: str = ""
    val: str = ""


class Bucket(_NotificationPart):
    name: str = ""
    owner_identity: UserIdentity = Field(
        default_factory=UserIdentity, alias="ownerIdentity"
    )
    arn: str = ""
    id: str = ""


class StoredObject(_NotificationPart):
    key: str = ""
    size: int = Field(default=0, ge=0)
    etag: str = Field(default="", alias="eTag")
    version_id: str = Field(default="", alias="versionId")
    sequencer: str = ""
    metadata: list[KeyValue] = Field(default_factory=list)
    tags: list[KeyValue] = Field(default_factory=list)


class S3Entity(_NotificationPart):
    schema_version: str = Field(default="", alias="s3SchemaVersion")
    configuration_id: str = Field(default="", alias="configurationId")
    bucket: Bucket = Field(default_factory=Bucket)
    object: StoredObject = Field(default_factory=StoredObject)


class BucketNotification(_NotificationPart):
    """One storage event from a notification batch."""
    event_version: str = Field(default="", alias="eventVersion")
    event_source: str = Field(default="", alias="eventSource")
    aws_region: str = Field(default="", alias="awsRegion")
    event_time: str = Field(default="", alias="eventTime")
    event_name: str = Field(default="", alias="eventName")
    user_identity: UserIdentity = Field(
        default_factory=UserIdentity, alias="userIdentity"
    )
    request_parameters: RequestParameters = Field(
        default_factory=RequestParameters, alias="requestParameters"
    )
    response_elements: ResponseElements = Field(
        default_factory=ResponseElements, alias="responseElements"
    )
    s3: S3Entity = Field(default_factory=S3Entity)
    event_id: str = Field(default="", alias="eventId")
    opaque_data: str = Field(default="", alias="opaqueData")

    def to_payload(self) -> dict[str, Any]:
        """Return the record in its wire form, unknown fields included."""
        return self.model_dump(by_alias=True, mode="json")


class NotificationBatch(_NotificationPart):
    """The body of one notification request. Record order is preserved."""
    records: list[BucketNotification] = Field(
        default_factory=list, alias="Records"
    )

    @property
    def size(self) -> int:
        return len(self.records)
