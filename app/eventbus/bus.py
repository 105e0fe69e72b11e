"""Event bus facade.

Composes the name normalizer, the subscription registry and the dispatch
pipeline, and delegates wire I/O to a broker adapter.
"""

from typing import Any, Optional, Type

from eventbus.brokers.base import BrokerAdapter, BrokerMessage
from eventbus.configuration import EventBusSettings
from eventbus.dispatch.pipeline import DispatchPipeline
from eventbus.events.handlers import bind_handler
from eventbus.events.models import IntegrationEvent
from eventbus.logging import get_module_logger
from eventbus.naming import EventNameNormalizer
from eventbus.serialization import EventSerializer, JsonEventSerializer
from eventbus.services.locator import ServiceLocator
from eventbus.subscriptions.registry import Registration, SubscriptionRegistry

logger = get_module_logger()


class EventBus:
    """Broker-agnostic publish/subscribe entry point.

    The bus owns its SubscriptionRegistry for its whole lifetime. The first
    subscription for an event name provisions broker routing through the
    adapter; removing the last one tears it down.

    Example:
        container = HandlerContainer()
        container.register(OrderCreatedHandler)

        with EventBus(settings.event_bus, InMemoryBrokerAdapter(settings.event_bus), container) as bus:
            bus.subscribe(OrderCreatedIntegrationEvent, OrderCreatedHandler)
            bus.publish(OrderCreatedIntegrationEvent(order_id="o-1"))
    """

    def __init__(
        self,
        settings: EventBusSettings,
        adapter: BrokerAdapter,
        locator: ServiceLocator,
        serializer: Optional[EventSerializer] = None,
    ):
        self._settings = settings
        self._adapter = adapter
        self._serializer = serializer or JsonEventSerializer()
        self._normalizer = EventNameNormalizer(
            prefix=settings.EVENT_NAME_PREFIX,
            suffix=settings.EVENT_NAME_SUFFIX,
        )
        self._registry = SubscriptionRegistry(self._normalizer)
        self._pipeline = DispatchPipeline(
            self._registry, self._serializer, locator, self._normalizer
        )
        self._adapter.attach(self._pipeline)
        self._registry.on_event_added(self._adapter.ensure_routing)
        self._registry.on_event_removed(self._adapter.teardown_routing)

    @property
    def settings(self) -> EventBusSettings:
        return self._settings

    @property
    def adapter(self) -> BrokerAdapter:
        return self._adapter

    @property
    def registry(self) -> SubscriptionRegistry:
        return self._registry

    @property
    def pipeline(self) -> DispatchPipeline:
        return self._pipeline

    @property
    def normalizer(self) -> EventNameNormalizer:
        return self._normalizer

    def event_name(self, event_type: Type[IntegrationEvent]) -> str:
        """Canonical event name for an event class."""
        return self._normalizer.for_type(event_type)

    def subscription_name(self, event_name: str) -> str:
        """Broker subscription name for an event name."""
        return self._adapter.subscription_name(self._normalizer.require(event_name))

    def publish(self, event: IntegrationEvent) -> BrokerMessage:
        """Serialize an event once and send it through the adapter.

        Returns:
            The BrokerMessage that was sent

        Raises:
            ConfigurationError: If the event class has an empty canonical name
            BrokerConnectionError: If the broker stayed unreachable
        """
        event_name = self._normalizer.for_type(type(event))
        body = self._serializer.serialize(event)
        message = self._adapter.publish(event_name, body)
        logger.info(
            "event_published",
            event_name=event_name,
            event_id=str(event.id),
            message_id=message.message_id,
        )
        return message

    def subscribe(
        self, event_type: Type[IntegrationEvent], handler: Any
    ) -> Registration:
        """Subscribe a handler to an event type.

        Several handlers may subscribe to the same event type. If broker
        routing cannot be provisioned for a new event name, the registration
        is rolled back and the error re-raised.

        Args:
            event_type: Integration event class
            handler: IntegrationEventHandler subclass or callable, resolved
                through the service locator at dispatch time

        Raises:
            ConfigurationError: Empty canonical name or handler/event mismatch
            DuplicateSubscriptionError: If the handler is already subscribed
            PayloadTypeConflictError: If the name is bound to another event class
        """
        event_name = self._normalizer.for_type(event_type)
        invoke = bind_handler(event_type, handler)
        return self._registry.add_subscription(event_name, handler, event_type, invoke)

    def unsubscribe(self, event_type: Type[IntegrationEvent], handler: Any) -> bool:
        """Remove a handler subscription.

        Returns:
            True if the handler was subscribed, False otherwise
        """
        event_name = self._normalizer.for_type(event_type)
        return self._registry.remove_subscription(event_name, handler)

    def start(self) -> None:
        self._adapter.start()
        logger.info(
            "event_bus_started",
            adapter=type(self._adapter).__name__,
            topic=self._settings.DEFAULT_TOPIC_NAME,
        )

    def close(self, wait: bool = True) -> None:
        """Stop the adapter, draining in-flight deliveries when wait is True."""
        self._adapter.close(wait=wait)
        logger.info("event_bus_closed")

    def __enter__(self) -> "EventBus":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
