"""Shared fixtures for the event bus test suite."""

import pytest

from eventbus.brokers import InMemoryBrokerAdapter
from eventbus.bus import EventBus
from eventbus.configuration import EventBusSettings
from eventbus.dispatch import DispatchPipeline
from eventbus.naming import EventNameNormalizer
from eventbus.serialization import JsonEventSerializer
from eventbus.services import HandlerContainer
from eventbus.subscriptions import SubscriptionRegistry
from tests.fixtures.events import (
    EventRecorder,
    FailingOrderCreatedHandler,
    OrderCreatedAuditHandler,
    OrderCreatedHandler,
    OrderShippedHandler,
)


@pytest.fixture
def settings_factory():
    """Factory for EventBusSettings with fast, test-friendly defaults."""

    def _factory(**overrides) -> EventBusSettings:
        values = {
            "CONNECTION_STRING": "Endpoint=sb://localhost/;SharedAccessKey=test",
            "EVENT_NAME_PREFIX": "",
            "EVENT_NAME_SUFFIX": "IntegrationEvent",
            "SUBSCRIBER_CLIENT_APP_NAME": "OrderService",
            "DEFAULT_TOPIC_NAME": "TestTopic",
            "CONNECTION_RETRY_COUNT": 2,
            "RETRY_BACKOFF_SECONDS": 0,
            "BROKER_TYPE": "in_memory",
            "MAX_CONCURRENT_CALLS": 4,
            "MAX_DELIVERY_COUNT": 3,
            "ACK_WHEN_NO_SUBSCRIBERS": True,
        }
        values.update(overrides)
        return EventBusSettings(**values)

    return _factory


@pytest.fixture
def bus_settings(settings_factory) -> EventBusSettings:
    return settings_factory()


@pytest.fixture
def normalizer() -> EventNameNormalizer:
    return EventNameNormalizer(prefix="", suffix="IntegrationEvent")


@pytest.fixture
def registry(normalizer) -> SubscriptionRegistry:
    return SubscriptionRegistry(normalizer)


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def container(recorder) -> HandlerContainer:
    """Container resolving every sample handler with the shared recorder."""
    handlers = HandlerContainer()
    for handler_cls in (
        OrderCreatedHandler,
        OrderCreatedAuditHandler,
        FailingOrderCreatedHandler,
        OrderShippedHandler,
    ):
        handlers.register(handler_cls, lambda cls=handler_cls: cls(recorder))
    return handlers


@pytest.fixture
def serializer() -> JsonEventSerializer:
    return JsonEventSerializer()


@pytest.fixture
def pipeline(registry, serializer, container) -> DispatchPipeline:
    return DispatchPipeline(registry, serializer, container)


@pytest.fixture
def in_memory_adapter(bus_settings):
    adapter = InMemoryBrokerAdapter(bus_settings)
    yield adapter
    adapter.close(wait=True)


@pytest.fixture
def event_bus(bus_settings, in_memory_adapter, container):
    bus = EventBus(bus_settings, in_memory_adapter, container)
    bus.start()
    yield bus
    bus.close()
