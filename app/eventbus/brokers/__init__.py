"""Broker adapters.

Importing this package registers the built-in adapters.
"""

from eventbus.brokers.base import BrokerAdapter, BrokerMessage
from eventbus.brokers.factory import (
    create_broker_adapter,
    get_registered_broker_types,
    register_broker_adapter,
)
from eventbus.brokers.in_memory import InMemoryBrokerAdapter, InMemoryNamespace

__all__ = [
    "BrokerAdapter",
    "BrokerMessage",
    "InMemoryBrokerAdapter",
    "InMemoryNamespace",
    "create_broker_adapter",
    "get_registered_broker_types",
    "register_broker_adapter",
]
