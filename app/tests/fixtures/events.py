"""Sample integration events and handlers shared by the test suite."""

import threading
from typing import List, Tuple

from eventbus.events import IntegrationEvent, IntegrationEventHandler


class OrderCreatedIntegrationEvent(IntegrationEvent):
    order_id: str
    buyer: str = "alice"


class OrderShippedIntegrationEvent(IntegrationEvent):
    order_id: str
    carrier: str = "post"


class EventRecorder:
    """Thread-safe record of handler invocations."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: List[Tuple[str, IntegrationEvent]] = []

    def record(self, handler_name: str, event: IntegrationEvent) -> None:
        with self._lock:
            self._calls.append((handler_name, event))

    @property
    def calls(self) -> List[Tuple[str, IntegrationEvent]]:
        with self._lock:
            return list(self._calls)

    def handler_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def events_for(self, handler_name: str) -> List[IntegrationEvent]:
        return [event for name, event in self.calls if name == handler_name]


class OrderCreatedHandler(IntegrationEventHandler[OrderCreatedIntegrationEvent]):
    def __init__(self, recorder: EventRecorder):
        self.recorder = recorder

    def handle(self, event: OrderCreatedIntegrationEvent) -> None:
        self.recorder.record("OrderCreatedHandler", event)


class OrderCreatedAuditHandler(IntegrationEventHandler[OrderCreatedIntegrationEvent]):
    def __init__(self, recorder: EventRecorder):
        self.recorder = recorder

    def handle(self, event: OrderCreatedIntegrationEvent) -> None:
        self.recorder.record("OrderCreatedAuditHandler", event)


class FailingOrderCreatedHandler(IntegrationEventHandler[OrderCreatedIntegrationEvent]):
    def __init__(self, recorder: EventRecorder):
        self.recorder = recorder

    def handle(self, event: OrderCreatedIntegrationEvent) -> None:
        self.recorder.record("FailingOrderCreatedHandler", event)
        raise RuntimeError("inventory service unavailable")


class OrderShippedHandler(IntegrationEventHandler[OrderShippedIntegrationEvent]):
    def __init__(self, recorder: EventRecorder):
        self.recorder = recorder

    def handle(self, event: OrderShippedIntegrationEvent) -> None:
        self.recorder.record("OrderShippedHandler", event)


def noop_invoke(handler, event) -> None:
    """Invoker stand-in for registry tests that never dispatch."""
    pass
