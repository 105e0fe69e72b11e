"""In-memory subscription registry.

Maps canonical event names to the ordered handler registrations bound to them
and to the payload type used to deserialize their messages.

Writes are serialized by a lock and publish a new immutable snapshot, so
readers on dispatch threads never take the lock and never observe a
partially-updated registration list.
"""

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Tuple, Type

from eventbus.events.handlers import Invoker
from eventbus.events.models import IntegrationEvent
from eventbus.exceptions import (
    DuplicateSubscriptionError,
    PayloadTypeConflictError,
    UnknownEventTypeError,
)
from eventbus.logging import get_module_logger
from eventbus.naming import EventNameNormalizer

logger = get_module_logger()

EventListener = Callable[[str], None]


@dataclass(frozen=True)
class Registration:
    """One handler bound to one canonical event name."""

    event_name: str
    """Canonical event name."""

    handler_id: Any
    """Opaque handler identifier, resolved by the service locator."""

    payload_type: Type[IntegrationEvent]
    """Event class the message body is deserialized into."""

    invoke: Invoker
    """Calls a resolved handler with a deserialized payload."""

    @property
    def handler_name(self) -> str:
        return getattr(self.handler_id, "__qualname__", None) or repr(self.handler_id)


@dataclass(frozen=True)
class _Snapshot:
    handlers: Mapping[str, Tuple[Registration, ...]]
    payload_types: Mapping[str, Type[IntegrationEvent]]


_EMPTY = _Snapshot(handlers=MappingProxyType({}), payload_types=MappingProxyType({}))


class SubscriptionRegistry:
    """Registry of handler subscriptions owned by one EventBus instance.

    Listeners registered with on_event_added / on_event_removed are called
    with the canonical event name when the first registration for a name is
    added and when the last one is removed. Each mutation and the listener
    calls it triggers run under one mutation lock, so provisioning and
    teardown for a name happen in the same order as the registrations that
    caused them. Readers never take the lock; they see the latest published
    snapshot. Listeners may call back into the registry.

    Example:
        registry = SubscriptionRegistry(EventNameNormalizer(suffix="IntegrationEvent"))
        registry.on_event_removed(adapter.teardown_routing)
        registry.add_subscription(
            "OrderCreatedIntegrationEvent", OrderCreatedHandler,
            OrderCreatedIntegrationEvent, invoke,
        )
        registry.has_subscriptions("OrderCreated")  # True
    """

    def __init__(self, normalizer: EventNameNormalizer):
        self._normalizer = normalizer
        self._snapshot = _EMPTY
        # Reentrant: listeners may subscribe or unsubscribe
        self._mutation_lock = threading.RLock()
        self._added_listeners: List[EventListener] = []
        self._removed_listeners: List[EventListener] = []

    @property
    def normalizer(self) -> EventNameNormalizer:
        return self._normalizer

    @property
    def is_empty(self) -> bool:
        return not self._snapshot.handlers

    def on_event_added(self, listener: EventListener) -> None:
        """Call listener when an event name gets its first registration."""
        self._added_listeners.append(listener)

    def on_event_removed(self, listener: EventListener) -> None:
        """Call listener when an event name loses its last registration."""
        self._removed_listeners.append(listener)

    def has_subscriptions(self, event_name: str) -> bool:
        name = self._normalizer.require(event_name)
        return name in self._snapshot.handlers

    def get_handlers(self, event_name: str) -> Tuple[Registration, ...]:
        """Registrations for an event name in registration order.

        Returns an empty tuple for unknown event names.
        """
        name = self._normalizer.require(event_name)
        return self._snapshot.handlers.get(name, ())

    def get_payload_type(self, event_name: str) -> Type[IntegrationEvent]:
        """Payload type bound to an event name.

        Raises:
            UnknownEventTypeError: If nothing is registered for the name
        """
        name = self._normalizer.require(event_name)
        try:
            return self._snapshot.payload_types[name]
        except KeyError:
            raise UnknownEventTypeError(name) from None

    def event_names(self) -> List[str]:
        return list(self._snapshot.handlers.keys())

    def add_subscription(
        self,
        event_name: str,
        handler_id: Any,
        payload_type: Type[IntegrationEvent],
        invoke: Invoker,
    ) -> Registration:
        """Append a registration for an event name.

        When this is the first registration for the name, the added listeners
        run before the call returns. If one of them raises, the registration
        is removed again (removal listeners are called to undo any partial
        provisioning) and the listener's error is re-raised.

        Args:
            event_name: Raw or canonical event name
            handler_id: Opaque handler identifier
            payload_type: Event class for deserialization
            invoke: Invoker built by bind_handler

        Returns:
            The stored Registration

        Raises:
            DuplicateSubscriptionError: If handler_id is already registered
            PayloadTypeConflictError: If the name is bound to another payload type
        """
        name = self._normalizer.require(event_name)
        registration = Registration(
            event_name=name,
            handler_id=handler_id,
            payload_type=payload_type,
            invoke=invoke,
        )

        with self._mutation_lock:
            current = self._snapshot
            existing = current.handlers.get(name, ())

            if any(r.handler_id == handler_id for r in existing):
                raise DuplicateSubscriptionError(name, handler_id)

            bound_type = current.payload_types.get(name)
            if bound_type is not None and bound_type is not payload_type:
                raise PayloadTypeConflictError(name, bound_type, payload_type)

            self._store(name, existing + (registration,), payload_type)
            logger.info(
                "subscription_added",
                event_name=name,
                handler=registration.handler_name,
                handler_count=len(existing) + 1,
            )

            if not existing:
                try:
                    self._notify(self._added_listeners, name)
                except Exception as e:
                    self._store(name, (), payload_type)
                    logger.error(
                        "subscription_rolled_back",
                        event_name=name,
                        handler=registration.handler_name,
                        error=str(e),
                    )
                    self._undo_provisioning(name)
                    raise

        return registration

    def remove_subscription(self, event_name: str, handler_id: Any) -> bool:
        """Remove a registration.

        Removing the last registration for a name removes the name and its
        payload type and notifies the removal listeners once, before the call
        returns.

        Returns:
            True if a registration was removed, False if the pair was unknown
        """
        name = self._normalizer.require(event_name)

        with self._mutation_lock:
            current = self._snapshot
            existing = current.handlers.get(name, ())
            remaining = tuple(r for r in existing if r.handler_id != handler_id)
            if len(remaining) == len(existing):
                return False

            self._store(name, remaining, current.payload_types[name])
            logger.info(
                "subscription_removed",
                event_name=name,
                handler_count=len(remaining),
            )
            if not remaining:
                self._notify(self._removed_listeners, name)

        return True

    def clear(self) -> None:
        """Remove every registration, notifying removal listeners per event name."""
        with self._mutation_lock:
            names = list(self._snapshot.handlers.keys())
            self._snapshot = _EMPTY
            for name in names:
                self._notify(self._removed_listeners, name)

    def _store(
        self,
        name: str,
        registrations: Tuple[Registration, ...],
        payload_type: Type[IntegrationEvent],
    ) -> None:
        # Publishes a new snapshot; caller holds the mutation lock
        handlers = dict(self._snapshot.handlers)
        payload_types = dict(self._snapshot.payload_types)
        if registrations:
            handlers[name] = registrations
            payload_types[name] = payload_type
        else:
            handlers.pop(name, None)
            payload_types.pop(name, None)
        self._snapshot = _Snapshot(
            handlers=MappingProxyType(handlers),
            payload_types=MappingProxyType(payload_types),
        )

    def _undo_provisioning(self, name: str) -> None:
        try:
            self._notify(self._removed_listeners, name)
        except Exception as e:
            logger.warning(
                "routing_teardown_failed",
                event_name=name,
                error=str(e),
            )

    def _notify(self, listeners: List[EventListener], event_name: str) -> None:
        for listener in list(listeners):
            listener(event_name)
