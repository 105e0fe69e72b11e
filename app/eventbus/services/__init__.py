"""Handler resolution and application-scoped providers."""

from eventbus.services.locator import HandlerContainer, ServiceLocator

__all__ = ["HandlerContainer", "ServiceLocator"]
