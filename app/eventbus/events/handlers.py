"""Integration event handler contract and registration-time binding."""

import inspect
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Optional, Type, TypeVar, get_args, get_origin

from eventbus.events.models import IntegrationEvent
from eventbus.exceptions import ConfigurationError, HandlerTypeMismatchError

TEvent = TypeVar("TEvent", bound=IntegrationEvent)

Invoker = Callable[[Any, IntegrationEvent], None]


class IntegrationEventHandler(ABC, Generic[TEvent]):
    """Base class for typed integration event handlers.

    The type argument declares which event the handler accepts; subscribing
    the handler to any other event type fails at registration time.

    Example:
        class OrderCreatedHandler(IntegrationEventHandler[OrderCreatedIntegrationEvent]):
            def handle(self, event: OrderCreatedIntegrationEvent) -> None:
                ...
    """

    @abstractmethod
    def handle(self, event: TEvent) -> None:
        """Process one delivered event."""
        pass


def declared_event_type(handler_type: type) -> Optional[type]:
    """Return the event type a handler class declares, if any.

    Walks the generic bases of the class hierarchy looking for
    ``IntegrationEventHandler[SomeEvent]``.
    """
    for klass in inspect.getmro(handler_type):
        for base in getattr(klass, "__orig_bases__", ()):
            if get_origin(base) is IntegrationEventHandler:
                args = get_args(base)
                if args and isinstance(args[0], type):
                    return args[0]
    return None


def bind_handler(event_type: Type[IntegrationEvent], handler_id: Any) -> Invoker:
    """Validate a handler against an event type and build its invoker.

    Handler classes deriving from IntegrationEventHandler are called through
    ``handle``; any other callable is called with the event directly.

    Args:
        event_type: Integration event class being subscribed to
        handler_id: Handler class or plain callable

    Returns:
        Callable taking ``(resolved_handler, event)``

    Raises:
        HandlerTypeMismatchError: If the handler declares another event type
        ConfigurationError: If the handler is neither a handler class nor callable
    """
    if not (isinstance(event_type, type) and issubclass(event_type, IntegrationEvent)):
        raise ConfigurationError(f"{event_type!r} is not an IntegrationEvent subclass")

    if isinstance(handler_id, type) and issubclass(handler_id, IntegrationEventHandler):
        declared = declared_event_type(handler_id)
        if declared is not None and not issubclass(event_type, declared):
            raise HandlerTypeMismatchError(handler_id, declared, event_type)

        def invoke_handler(handler: Any, event: IntegrationEvent) -> None:
            handler.handle(event)

        return invoke_handler

    if callable(handler_id):

        def invoke_callable(handler: Any, event: IntegrationEvent) -> None:
            handler(event)

        return invoke_callable

    raise ConfigurationError(f"Handler {handler_id!r} is not callable")
