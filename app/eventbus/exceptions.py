"""Custom exceptions for the event bus.

Registry errors (duplicate subscription, payload conflict, unknown event type)
are programming errors and surface synchronously to the caller. Dispatch
failures are reported as ProcessingOutcome values and only become exceptions
through ProcessingOutcome.raise_for_status().
"""

from typing import Any, Optional, Sequence


class EventBusError(Exception):
    """Base exception for all event bus errors.

    Example:
        try:
            bus.subscribe(OrderCreatedIntegrationEvent, OrderCreatedHandler)
        except EventBusError as e:
            logger.error("subscribe_failed", error=str(e))
    """

    pass


class ConfigurationError(EventBusError):
    """Raised when the bus is configured or used inconsistently.

    Example:
        >>> normalizer.require("IntegrationEvent")
        Traceback (most recent call last):
        ...
        ConfigurationError: Event name 'IntegrationEvent' normalizes to an empty name
    """

    pass


class HandlerTypeMismatchError(ConfigurationError):
    """Raised when a handler declares a payload type incompatible with the event."""

    def __init__(self, handler_id: Any, declared_type: type, event_type: type):
        super().__init__(
            f"Handler {_describe(handler_id)} handles {declared_type.__name__}, "
            f"not {event_type.__name__}"
        )
        self.handler_id = handler_id
        self.declared_type = declared_type
        self.event_type = event_type


class DuplicateSubscriptionError(EventBusError):
    """Raised when the same handler is subscribed twice to one event name.

    Example:
        >>> registry.add_subscription("OrderCreated", Handler, OrderCreated, invoke)
        >>> registry.add_subscription("OrderCreated", Handler, OrderCreated, invoke)
        Traceback (most recent call last):
        ...
        DuplicateSubscriptionError: Handler Handler already subscribed to 'OrderCreated'
    """

    def __init__(self, event_name: str, handler_id: Any):
        super().__init__(
            f"Handler {_describe(handler_id)} already subscribed to '{event_name}'"
        )
        self.event_name = event_name
        self.handler_id = handler_id


class UnknownEventTypeError(EventBusError):
    """Raised when a payload type is requested for an unregistered event name."""

    def __init__(self, event_name: str):
        super().__init__(f"No payload type registered for event '{event_name}'")
        self.event_name = event_name


class PayloadTypeConflictError(EventBusError):
    """Raised when an event name is bound to a second, different payload type."""

    def __init__(self, event_name: str, existing: type, requested: type):
        super().__init__(
            f"Event '{event_name}' is bound to {existing.__name__}, "
            f"cannot bind {requested.__name__}"
        )
        self.event_name = event_name
        self.existing = existing
        self.requested = requested


class DeserializationError(EventBusError):
    """Raised when a wire payload cannot be decoded into its payload type."""

    def __init__(
        self,
        message: str,
        payload_type: Optional[type] = None,
        event_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.payload_type = payload_type
        self.event_name = event_name


class PartialFailureError(EventBusError):
    """Raised from an outcome where one or more fan-out handlers failed.

    Attributes:
        failed_handlers: Handler identifiers that raised, in registration order
    """

    def __init__(self, event_name: str, failed_handlers: Sequence[Any]):
        names = ", ".join(_describe(h) for h in failed_handlers)
        super().__init__(f"Handlers failed for event '{event_name}': {names}")
        self.event_name = event_name
        self.failed_handlers = tuple(failed_handlers)


class BrokerError(EventBusError):
    """Base exception for broker adapter errors."""

    pass


class BrokerConnectionError(BrokerError):
    """Raised when the broker cannot be reached. Sends are retried on this."""

    pass


class MessagingEntityNotFoundError(BrokerError):
    """Raised when a topic, subscription or rule does not exist on the broker."""

    def __init__(self, entity_path: str):
        super().__init__(f"Messaging entity '{entity_path}' could not be found")
        self.entity_path = entity_path


def _describe(handler_id: Any) -> str:
    return getattr(handler_id, "__qualname__", None) or repr(handler_id)
