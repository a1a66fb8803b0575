"""Normalized event envelope.

Records leave the bridge inside this envelope. Its attributes follow
CloudEvents 1.0 so any CloudEvents-aware sink can consume them; the
payload is the notification record exactly as received.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

SPEC_VERSION = "1.0"
REQUIRED_ATTRIBUTES = ("id", "source", "type")


class EventEnvelope(BaseModel):
    """Immutable CloudEvent built from one bucket notification."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        description="Request id and host id of the originating request, concatenated"
    )
    source: str = Field(
        description="Dotted origin: event source, region, bucket"
    )
    type: str = Field(
        description="Vendor-prefixed event name"
    )
    subject: str = Field(
        default="",
        description="Object key the notification refers to"
    )
    time: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the storage event happened (or was received, if unparsable)"
    )
    specversion: str = Field(default=SPEC_VERSION)
    datacontenttype: str = Field(default="application/json")
    data: bytes = Field(
        default=b"",
        description="Encoded notification record"
    )
    extensions: dict[str, str] = Field(
        default_factory=dict,
        description="CloudEvents extension attributes"
    )

    def missing_attributes(self) -> list[str]:
        """Names of required attributes that are empty."""
        return [name for name in REQUIRED_ATTRIBUTES if not getattr(self, name)]

    def with_extensions(self, extensions: dict[str, str]) -> EventEnvelope:
        """Copy of this envelope with extensions merged in (overrides win)."""
        if not extensions:
            return self
        return self.model_copy(
            update={"extensions": {**self.extensions, **extensions}}
        )

    def formatted_time(self) -> str:
        """RFC 3339 timestamp in UTC with a trailing Z."""
        ts = self.time
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
