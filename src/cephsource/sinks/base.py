"""Abstract sink interface.

A sink is where envelopes go after mapping. The contract is a single
send that reports whether the sink acknowledged the event. Sinks do NOT
retry, buffer, or reorder -- one call is one delivery attempt.

Sinks are shared by every in-flight request, so implementations must be
safe to call concurrently from the event loop.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from cephsource.models.events import EventEnvelope

logger = logging.getLogger("cephsource.sinks")

RESOURCE_GROUP = "cephsources.sources.knative.dev"


class DeliveryStatus(str, Enum):
    """Outcome of one delivery attempt."""
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class MetricTag:
    """Attribution attached to every send for per-adapter accounting."""
    name: str
    namespace: str
    resource_group: str = RESOURCE_GROUP

    @property
    def key(self) -> str:
        return f"{self.resource_group}/{self.namespace}/{self.name}"


@dataclass
class DeliveryResult:
    """Acknowledgement or negative acknowledgement from a sink."""
    status: DeliveryStatus
    cause: Optional[BaseException] = None
    status_code: Optional[int] = None

    @property
    def accepted(self) -> bool:
        return self.status == DeliveryStatus.ACCEPTED

    @classmethod
    def ack(cls, status_code: Optional[int] = None) -> DeliveryResult:
        return cls(DeliveryStatus.ACCEPTED, status_code=status_code)

    @classmethod
    def nack(
        cls, cause: BaseException, status_code: Optional[int] = None
    ) -> DeliveryResult:
        return cls(DeliveryStatus.REJECTED, cause=cause, status_code=status_code)


@dataclass
class SinkHealth:
    """Delivery counters for a sink."""
    sink_type: str = ""
    target: str = ""
    accepted: int = 0
    rejected: int = 0
    by_tag: dict[str, dict[str, int]] = field(default_factory=dict)
    last_delivery_at: datetime | None = None
    checked_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class Sink(ABC):
    """Abstract base for envelope transports.

    Subclasses implement send() and may override close() to release
    connections. Counters are kept here; call _record_delivery() once
    per attempt.
    """

    def __init__(self, target: str = ""):
        self.target = target
        self._accepted = 0
        self._rejected = 0
        self._by_tag: dict[str, dict[str, int]] = {}
        self._last_delivery_at: datetime | None = None

    @property
    @abstractmethod
    def sink_type(self) -> str:
        """Return the sink type identifier (e.g. 'http')."""
        ...

    @abstractmethod
    async def send(self, envelope: EventEnvelope, tag: MetricTag) -> DeliveryResult:
        """Deliver one envelope.

        Must not raise for delivery failures -- a refused or failed
        attempt is returned as a rejected DeliveryResult with its cause.
        """
        ...

    async def close(self) -> None:
        """Release transport resources."""
        return None

    def health(self) -> SinkHealth:
        return SinkHealth(
            sink_type=self.sink_type,
            target=self.target,
            accepted=self._accepted,
            rejected=self._rejected,
            by_tag={k: dict(v) for k, v in self._by_tag.items()},
            last_delivery_at=self._last_delivery_at,
        )

    def _record_delivery(self, tag: MetricTag, result: DeliveryResult) -> None:
        """Track delivery outcome under the caller's metric tag."""
        counters = self._by_tag.setdefault(
            tag.key, {DeliveryStatus.ACCEPTED.value: 0, DeliveryStatus.REJECTED.value: 0}
        )
        counters[result.status.value] += 1
        if result.accepted:
            self._accepted += 1
        else:
            self._rejected += 1
            logger.warning(
                "Sink %s rejected delivery [%s]: %s",
                self.sink_type, tag.key, result.cause,
            )
        self._last_delivery_at = datetime.now(timezone.utc)
