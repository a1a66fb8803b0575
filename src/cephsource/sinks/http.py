"""HTTP sink.

Posts envelopes to an addressable URI using the CloudEvents HTTP binary
content mode: event attributes travel as ce-* headers and the record
JSON is the request body. Any 2xx response acknowledges the event.

The underlying httpx.AsyncClient is created on first use and shared by
every request the adapter is serving.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from cephsource.errors import InvalidEnvelopeError, SinkRejectedError
from cephsource.models.events import EventEnvelope
from cephsource.sinks.base import DeliveryResult, MetricTag, Sink

logger = logging.getLogger("cephsource.sinks.http")

DEFAULT_TIMEOUT = 30.0
RESPONSE_SNIPPET_LENGTH = 500


def encode_header_value(value: str) -> str:
    """Percent-encode a ce-* header value.

    Space, double quote, percent and anything outside printable ASCII
    are encoded as UTF-8 octets, as the HTTP binding requires.
    """
    out = []
    for ch in value:
        if ch in ' "%' or not 0x21 <= ord(ch) <= 0x7E:
            out.extend(f"%{b:02X}" for b in ch.encode("utf-8"))
        else:
            out.append(ch)
    return "".join(out)


def binary_headers(envelope: EventEnvelope) -> dict[str, str]:
    """Build CloudEvents binary-mode headers for an envelope."""
    attributes = {
        "specversion": envelope.specversion,
        "id": envelope.id,
        "source": envelope.source,
        "type": envelope.type,
        "time": envelope.formatted_time(),
    }
    if envelope.subject:
        attributes["subject"] = envelope.subject
    attributes.update(envelope.extensions)

    headers = {
        f"ce-{name}": encode_header_value(value)
        for name, value in attributes.items()
    }
    headers["Content-Type"] = envelope.datacontenttype
    return headers


class HttpSink(Sink):
    """Sink for any CloudEvents-over-HTTP receiver.

    Args:
        uri: Target URL (K_SINK).
        timeout: Per-request timeout in seconds.
        client: Pre-built client, mostly for tests (the sink closes it).
    """

    def __init__(
        self,
        uri: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(target=uri)
        self._timeout = timeout
        self._client = client

    @property
    def sink_type(self) -> str:
        return "http"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def send(self, envelope: EventEnvelope, tag: MetricTag) -> DeliveryResult:
        missing = envelope.missing_attributes()
        if missing:
            result = DeliveryResult.nack(InvalidEnvelopeError(missing))
            self._record_delivery(tag, result)
            return result

        try:
            response = await self._get_client().post(
                self.target,
                content=envelope.data,
                headers=binary_headers(envelope),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            result = DeliveryResult.nack(e)
        else:
            if response.is_success:
                result = DeliveryResult.ack(status_code=response.status_code)
            else:
                snippet = response.text[:RESPONSE_SNIPPET_LENGTH] if response.text else ""
                result = DeliveryResult.nack(
                    SinkRejectedError(response.status_code, snippet),
                    status_code=response.status_code,
                )

        self._record_delivery(tag, result)
        return result

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("HTTP sink [%s] closed", self.target)
