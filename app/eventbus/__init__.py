"""Broker-agnostic integration event bus.

Application code publishes integration events and subscribes typed handlers
to them without depending on the broker that transports them.

Usage:

    from eventbus import (
        HandlerContainer,
        IntegrationEvent,
        IntegrationEventHandler,
        create_event_bus,
    )

    class OrderCreatedIntegrationEvent(IntegrationEvent):
        order_id: str

    class OrderCreatedHandler(IntegrationEventHandler[OrderCreatedIntegrationEvent]):
        def handle(self, event: OrderCreatedIntegrationEvent) -> None:
            ...

    container = HandlerContainer()
    container.register(OrderCreatedHandler)

    with create_event_bus(locator=container) as bus:
        bus.subscribe(OrderCreatedIntegrationEvent, OrderCreatedHandler)
        bus.publish(OrderCreatedIntegrationEvent(order_id="o-1"))
"""

from eventbus.brokers import (
    BrokerAdapter,
    BrokerMessage,
    InMemoryBrokerAdapter,
    register_broker_adapter,
)
from eventbus.bus import EventBus
from eventbus.configuration import EventBusSettings, Settings, get_settings
from eventbus.dispatch import DispatchPipeline, DispatchStatus, ProcessingOutcome
from eventbus.events import IntegrationEvent, IntegrationEventHandler
from eventbus.exceptions import (
    BrokerConnectionError,
    BrokerError,
    ConfigurationError,
    DeserializationError,
    DuplicateSubscriptionError,
    EventBusError,
    HandlerTypeMismatchError,
    MessagingEntityNotFoundError,
    PartialFailureError,
    PayloadTypeConflictError,
    UnknownEventTypeError,
)
from eventbus.naming import EventNameNormalizer
from eventbus.serialization import EventSerializer, JsonEventSerializer
from eventbus.services import HandlerContainer, ServiceLocator
from eventbus.services.providers import create_event_bus
from eventbus.subscriptions import Registration, SubscriptionRegistry

__all__ = [
    # Facade
    "EventBus",
    "create_event_bus",
    # Events
    "IntegrationEvent",
    "IntegrationEventHandler",
    # Core
    "EventNameNormalizer",
    "SubscriptionRegistry",
    "Registration",
    "DispatchPipeline",
    "DispatchStatus",
    "ProcessingOutcome",
    # Collaborators
    "BrokerAdapter",
    "BrokerMessage",
    "InMemoryBrokerAdapter",
    "register_broker_adapter",
    "EventSerializer",
    "JsonEventSerializer",
    "ServiceLocator",
    "HandlerContainer",
    # Configuration
    "EventBusSettings",
    "Settings",
    "get_settings",
    # Errors
    "EventBusError",
    "ConfigurationError",
    "HandlerTypeMismatchError",
    "DuplicateSubscriptionError",
    "UnknownEventTypeError",
    "PayloadTypeConflictError",
    "DeserializationError",
    "PartialFailureError",
    "BrokerError",
    "BrokerConnectionError",
    "MessagingEntityNotFoundError",
]
