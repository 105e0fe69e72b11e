"""Handler resolution.

The dispatch pipeline never instantiates handlers itself; it asks a
ServiceLocator for an instance per delivery and skips handlers the locator
cannot resolve.
"""

import threading
from typing import Any, Callable, Dict, Optional, Protocol

from eventbus.logging import get_module_logger

logger = get_module_logger()


class ServiceLocator(Protocol):
    """Resolves handler identifiers to handler instances."""

    def resolve(self, handler_id: Any) -> Optional[Any]:
        """Return a handler instance, or None when the handler is not available."""
        ...


class HandlerContainer:
    """Minimal service locator with transient factories and singletons.

    Example:
        container = HandlerContainer()
        container.register(OrderCreatedHandler)  # new instance per delivery
        container.register(AuditHandler, lambda: AuditHandler(store))
        container.register_instance(send_email, send_email)

        bus = EventBus(settings, adapter, container)
    """

    def __init__(self) -> None:
        self._factories: Dict[Any, Callable[[], Any]] = {}
        self._instances: Dict[Any, Any] = {}
        self._lock = threading.Lock()

    def register(
        self, handler_id: Any, factory: Optional[Callable[[], Any]] = None
    ) -> None:
        """Register a factory called on every resolve.

        Args:
            handler_id: Handler identifier, usually the handler class
            factory: Zero-argument callable; defaults to handler_id itself
        """
        with self._lock:
            self._instances.pop(handler_id, None)
            self._factories[handler_id] = factory or handler_id

    def register_instance(self, handler_id: Any, instance: Any) -> None:
        """Register a shared instance returned on every resolve."""
        with self._lock:
            self._factories.pop(handler_id, None)
            self._instances[handler_id] = instance

    def unregister(self, handler_id: Any) -> None:
        with self._lock:
            self._factories.pop(handler_id, None)
            self._instances.pop(handler_id, None)

    def resolve(self, handler_id: Any) -> Optional[Any]:
        with self._lock:
            instance = self._instances.get(handler_id)
            factory = self._factories.get(handler_id)
        if instance is not None:
            return instance
        if factory is None:
            logger.debug("handler_not_registered", handler=repr(handler_id))
            return None
        return factory()

    def __contains__(self, handler_id: Any) -> bool:
        return handler_id in self._factories or handler_id in self._instances
