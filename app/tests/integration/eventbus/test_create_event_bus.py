"""Tests for wiring an EventBus from configuration."""

import pytest

from eventbus.brokers import InMemoryBrokerAdapter
from eventbus.bus import EventBus
from eventbus.configuration import get_settings
from eventbus.exceptions import ConfigurationError
from eventbus.services.providers import create_event_bus
from tests.fixtures.events import OrderCreatedHandler, OrderCreatedIntegrationEvent

pytestmark = pytest.mark.integration


class TestCreateEventBus:
    def test_builds_bus_with_configured_adapter(self, bus_settings, container):
        bus = create_event_bus(bus_settings, locator=container)
        try:
            assert isinstance(bus, EventBus)
            assert isinstance(bus.adapter, InMemoryBrokerAdapter)
            assert bus.settings is bus_settings
        finally:
            bus.close()

    def test_round_trip(self, bus_settings, container, recorder):
        with create_event_bus(bus_settings, locator=container) as bus:
            bus.subscribe(OrderCreatedIntegrationEvent, OrderCreatedHandler)
            event = OrderCreatedIntegrationEvent(order_id="o-1")

            bus.publish(event)
            bus.adapter.wait_until_idle(5)

        assert recorder.events_for("OrderCreatedHandler") == [event]

    def test_unknown_broker_type(self, settings_factory):
        with pytest.raises(ConfigurationError):
            create_event_bus(settings_factory(BROKER_TYPE="kafka"))

    def test_defaults_to_process_settings(self, monkeypatch):
        monkeypatch.setenv("EVENT_BUS_DEFAULT_TOPIC_NAME", "FromEnvironment")
        get_settings.cache_clear()
        try:
            bus = create_event_bus()
            try:
                assert bus.settings.DEFAULT_TOPIC_NAME == "FromEnvironment"
            finally:
                bus.close()
        finally:
            get_settings.cache_clear()
