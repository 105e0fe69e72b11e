"""Base broker adapter abstract class.

All broker-specific adapters inherit from this base class. An adapter owns
the wire: sending messages, provisioning broker-side routing per event name,
receiving deliveries and deciding whether to acknowledge them.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

import structlog

from eventbus.configuration import EventBusSettings
from eventbus.dispatch.outcomes import DispatchStatus, ProcessingOutcome
from eventbus.exceptions import BrokerConnectionError, BrokerError
from eventbus.logging import bind_message_context

if TYPE_CHECKING:
    from eventbus.dispatch.pipeline import DispatchPipeline


logger = structlog.get_logger()


@dataclass(frozen=True)
class BrokerMessage:
    """A message as carried by the broker."""

    label: str
    """Canonical event name, used by broker rules for routing."""

    body: bytes
    """Serialized integration event."""

    message_id: str = field(default_factory=lambda: str(uuid4()))
    """Broker message id, distinct from the event id."""

    delivery_count: int = 1
    """How many times the message has been delivered."""

    def redelivered(self) -> "BrokerMessage":
        return replace(self, delivery_count=self.delivery_count + 1)


class BrokerAdapter(ABC):
    """Abstract base class for broker adapters.

    Subclasses must implement:
    - send(): put one message on the wire
    - ensure_routing(): create-if-not-exists topology for an event name
    - teardown_routing(): remove that topology, tolerating missing entities

    The EventBus attaches its DispatchPipeline before any routing is
    provisioned; deliveries are handed to handle_delivery().
    """

    def __init__(self, settings: EventBusSettings):
        self._settings = settings
        self._pipeline: Optional["DispatchPipeline"] = None
        self._logger = logger.bind(
            adapter=type(self).__name__,
            topic=settings.DEFAULT_TOPIC_NAME,
        )

    @property
    def settings(self) -> EventBusSettings:
        return self._settings

    def attach(self, pipeline: "DispatchPipeline") -> None:
        """Attach the pipeline deliveries are dispatched to."""
        self._pipeline = pipeline

    def subscription_name(self, event_name: str) -> str:
        """Broker subscription name for a canonical event name."""
        return f"{self._settings.SUBSCRIBER_CLIENT_APP_NAME}.{event_name}"

    def publish(self, event_name: str, body: bytes) -> BrokerMessage:
        """Wrap a body into a message labelled with the event name and send it.

        Connection errors are retried CONNECTION_RETRY_COUNT times with
        exponential backoff; the same message id is kept across attempts.

        Raises:
            BrokerConnectionError: If every attempt failed
        """
        message = BrokerMessage(label=event_name, body=body)
        max_retries = self._settings.CONNECTION_RETRY_COUNT

        for attempt in range(max_retries + 1):
            try:
                self.send(message)
                if attempt > 0:
                    self._logger.info(
                        "message_send_retry_success",
                        event_name=event_name,
                        message_id=message.message_id,
                        attempt=attempt + 1,
                    )
                return message
            except BrokerConnectionError as e:
                if attempt == max_retries:
                    self._logger.error(
                        "message_send_failed",
                        event_name=event_name,
                        message_id=message.message_id,
                        attempts=attempt + 1,
                        error=str(e),
                    )
                    raise
                delay = self._settings.RETRY_BACKOFF_SECONDS * (2**attempt)
                self._logger.warning(
                    "message_send_retrying",
                    event_name=event_name,
                    message_id=message.message_id,
                    attempt=attempt + 1,
                    delay=delay,
                    error=str(e),
                )
                time.sleep(delay)

        return message

    def handle_delivery(self, message: BrokerMessage) -> ProcessingOutcome:
        """Dispatch a delivered message through the attached pipeline.

        Raises:
            BrokerError: If no pipeline is attached
        """
        if self._pipeline is None:
            raise BrokerError("No dispatch pipeline attached to broker adapter")

        with bind_message_context(
            message_id=message.message_id,
            delivery_count=message.delivery_count,
        ):
            return self._pipeline.process(message.label, message.body)

    def should_acknowledge(self, outcome: ProcessingOutcome) -> bool:
        """Whether a delivery with this outcome is completed on the broker.

        Only fully successful dispatches are acknowledged, plus messages
        nobody subscribes to when ACK_WHEN_NO_SUBSCRIBERS is set. Everything
        else is left to the broker's redelivery policy.
        """
        if outcome.status == DispatchStatus.SUCCESS:
            return True
        if outcome.status == DispatchStatus.NO_SUBSCRIBERS:
            return self._settings.ACK_WHEN_NO_SUBSCRIBERS
        return False

    @abstractmethod
    def send(self, message: BrokerMessage) -> None:
        """Send one message to the configured topic.

        Raises:
            BrokerConnectionError: On transient connection failures
        """
        pass

    @abstractmethod
    def ensure_routing(self, event_name: str) -> None:
        """Provision subscription and routing rule for an event name.

        Must be idempotent: existing entities are left untouched.
        """
        pass

    @abstractmethod
    def teardown_routing(self, event_name: str) -> None:
        """Remove the routing rule for an event name.

        Must tolerate entities that no longer exist.
        """
        pass

    def start(self) -> None:
        """Open connections and start receiving. Default does nothing."""
        pass

    def close(self, wait: bool = True) -> None:
        """Stop receiving and release connections.

        Args:
            wait: If True, let in-flight deliveries finish first
        """
        pass
