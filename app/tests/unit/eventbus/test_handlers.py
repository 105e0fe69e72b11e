"""Unit tests for the handler contract and registration-time binding."""

from unittest.mock import MagicMock

import pytest

from eventbus.events import IntegrationEventHandler, bind_handler, declared_event_type
from eventbus.exceptions import ConfigurationError, HandlerTypeMismatchError
from tests.fixtures.events import (
    OrderCreatedHandler,
    OrderCreatedIntegrationEvent,
    OrderShippedIntegrationEvent,
)

pytestmark = pytest.mark.unit


class PriorityOrderCreatedIntegrationEvent(OrderCreatedIntegrationEvent):
    priority: int = 1


class InheritedOrderCreatedHandler(OrderCreatedHandler):
    pass


class TestDeclaredEventType:
    def test_reads_generic_argument(self):
        assert declared_event_type(OrderCreatedHandler) is OrderCreatedIntegrationEvent

    def test_reads_generic_argument_from_parent_class(self):
        assert (
            declared_event_type(InheritedOrderCreatedHandler)
            is OrderCreatedIntegrationEvent
        )

    def test_returns_none_without_type_argument(self):
        class Untyped(IntegrationEventHandler):
            def handle(self, event):
                pass

        assert declared_event_type(Untyped) is None


class TestBindHandler:
    def test_handler_class_is_invoked_through_handle(self):
        invoke = bind_handler(OrderCreatedIntegrationEvent, OrderCreatedHandler)
        handler = MagicMock()
        event = OrderCreatedIntegrationEvent(order_id="o-1")

        invoke(handler, event)

        handler.handle.assert_called_once_with(event)

    def test_callable_is_invoked_directly(self):
        func = MagicMock()
        invoke = bind_handler(OrderCreatedIntegrationEvent, func)
        event = OrderCreatedIntegrationEvent(order_id="o-1")

        invoke(func, event)

        func.assert_called_once_with(event)

    def test_event_subclass_is_accepted(self):
        invoke = bind_handler(PriorityOrderCreatedIntegrationEvent, OrderCreatedHandler)

        assert callable(invoke)

    def test_mismatched_event_type_fails_at_registration(self):
        with pytest.raises(HandlerTypeMismatchError) as exc_info:
            bind_handler(OrderShippedIntegrationEvent, OrderCreatedHandler)

        assert exc_info.value.declared_type is OrderCreatedIntegrationEvent
        assert exc_info.value.event_type is OrderShippedIntegrationEvent

    def test_mismatch_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            bind_handler(OrderShippedIntegrationEvent, OrderCreatedHandler)

    def test_non_event_type_is_rejected(self):
        with pytest.raises(ConfigurationError):
            bind_handler(dict, OrderCreatedHandler)

    def test_non_callable_handler_is_rejected(self):
        with pytest.raises(ConfigurationError):
            bind_handler(OrderCreatedIntegrationEvent, "not-a-handler")
