"""Integration events and handler contract."""

from eventbus.events.handlers import (
    IntegrationEventHandler,
    bind_handler,
    declared_event_type,
)
from eventbus.events.models import IntegrationEvent

__all__ = [
    "IntegrationEvent",
    "IntegrationEventHandler",
    "bind_handler",
    "declared_event_type",
]
