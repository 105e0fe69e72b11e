"""Factory functions wiring an EventBus from configuration."""

from typing import Optional

from eventbus.brokers import create_broker_adapter
from eventbus.bus import EventBus
from eventbus.configuration import EventBusSettings, get_settings
from eventbus.serialization import EventSerializer
from eventbus.services.locator import HandlerContainer, ServiceLocator


def create_event_bus(
    settings: Optional[EventBusSettings] = None,
    locator: Optional[ServiceLocator] = None,
    serializer: Optional[EventSerializer] = None,
) -> EventBus:
    """Build an EventBus with the adapter named by BROKER_TYPE.

    Args:
        settings: Event bus settings; defaults to the process settings
        locator: Handler locator; defaults to an empty HandlerContainer
        serializer: Event serializer; defaults to JSON

    Returns:
        A configured, not yet started EventBus

    Raises:
        ConfigurationError: If BROKER_TYPE names no registered adapter

    Example:
        container = HandlerContainer()
        container.register(OrderCreatedHandler)

        bus = create_event_bus(locator=container)
        bus.start()
    """
    bus_settings = settings or get_settings().event_bus
    adapter = create_broker_adapter(bus_settings)
    return EventBus(
        bus_settings,
        adapter,
        locator if locator is not None else HandlerContainer(),
        serializer=serializer,
    )
