"""Exception hierarchy for the notification bridge.

Every failure that ends a batch derives from BridgeError so the ingress
layer can turn it into a client error with the exception text as body.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for failures surfaced to the notification sender."""


class ConfigError(Exception):
    """Configuration is missing or invalid at startup."""


class MalformedPayloadError(BridgeError):
    """Request body is not a decodable notification batch."""


class SerializationError(BridgeError):
    """A notification record could not be encoded as event data."""


class DeliveryError(BridgeError):
    """The sink did not acknowledge an event."""

    def __init__(self, envelope_id: str, cause: BaseException | None):
        self.envelope_id = envelope_id
        self.cause = cause
        detail = str(cause) if cause is not None else "negative acknowledgement"
        super().__init__(f"failed to send event {envelope_id!r}: {detail}")


class SinkRejectedError(Exception):
    """Sink answered with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        msg = f"sink responded with HTTP {status_code}"
        if body:
            msg = f"{msg}: {body}"
        super().__init__(msg)


class InvalidEnvelopeError(Exception):
    """Envelope lacks attributes required by CloudEvents."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            "invalid event: missing required attribute(s) " + ", ".join(missing)
        )
