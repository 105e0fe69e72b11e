"""Broker adapter registry.

Adapters register themselves under a broker type name; the bus factory
picks one from EVENT_BUS_BROKER_TYPE.
"""

from typing import Callable, Dict, List, Type, TypeVar

import structlog

from eventbus.brokers.base import BrokerAdapter
from eventbus.configuration import EventBusSettings
from eventbus.exceptions import ConfigurationError

logger = structlog.get_logger()

TAdapter = TypeVar("TAdapter", bound=Type[BrokerAdapter])

# Global registry: broker type name -> adapter class
_BROKER_ADAPTERS: Dict[str, Type[BrokerAdapter]] = {}


def register_broker_adapter(name: str) -> Callable[[TAdapter], TAdapter]:
    """Class decorator registering a broker adapter under a broker type name.

    Example:
        @register_broker_adapter("in_memory")
        class InMemoryBrokerAdapter(BrokerAdapter):
            ...
    """

    def decorator(adapter_cls: TAdapter) -> TAdapter:
        existing = _BROKER_ADAPTERS.get(name)
        if existing is not None and existing is not adapter_cls:
            raise ConfigurationError(
                f"Broker adapter '{name}' already registered by {existing.__name__}"
            )
        _BROKER_ADAPTERS[name] = adapter_cls
        logger.debug(
            "broker_adapter_registered",
            broker_type=name,
            adapter=adapter_cls.__name__,
        )
        return adapter_cls

    return decorator


def get_registered_broker_types() -> List[str]:
    return sorted(_BROKER_ADAPTERS.keys())


def create_broker_adapter(settings: EventBusSettings) -> BrokerAdapter:
    """Instantiate the adapter named by settings.BROKER_TYPE.

    Raises:
        ConfigurationError: If no adapter is registered under that name
    """
    adapter_cls = _BROKER_ADAPTERS.get(settings.BROKER_TYPE)
    if adapter_cls is None:
        raise ConfigurationError(
            f"Unknown broker type '{settings.BROKER_TYPE}'. "
            f"Registered: {', '.join(get_registered_broker_types()) or 'none'}"
        )
    return adapter_cls(settings)
