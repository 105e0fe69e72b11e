"""Unit tests for the HandlerContainer service locator."""

from unittest.mock import MagicMock

import pytest

from eventbus.services import HandlerContainer
from tests.fixtures.events import EventRecorder, OrderCreatedHandler

pytestmark = pytest.mark.unit


class SimpleHandler:
    def __call__(self, event):
        pass


class TestHandlerContainer:
    def test_register_without_factory_instantiates_class(self):
        container = HandlerContainer()
        container.register(SimpleHandler)

        first = container.resolve(SimpleHandler)
        second = container.resolve(SimpleHandler)

        assert isinstance(first, SimpleHandler)
        assert first is not second

    def test_register_with_factory(self):
        recorder = EventRecorder()
        container = HandlerContainer()
        container.register(OrderCreatedHandler, lambda: OrderCreatedHandler(recorder))

        handler = container.resolve(OrderCreatedHandler)

        assert handler.recorder is recorder

    def test_register_instance_returns_same_object(self):
        instance = MagicMock()
        container = HandlerContainer()
        container.register_instance("audit", instance)

        assert container.resolve("audit") is instance
        assert container.resolve("audit") is instance

    def test_register_replaces_instance(self):
        container = HandlerContainer()
        container.register_instance(SimpleHandler, MagicMock())
        container.register(SimpleHandler)

        assert isinstance(container.resolve(SimpleHandler), SimpleHandler)

    def test_unknown_handler_resolves_to_none(self):
        container = HandlerContainer()

        assert container.resolve(SimpleHandler) is None

    def test_unregister(self):
        container = HandlerContainer()
        container.register(SimpleHandler)

        container.unregister(SimpleHandler)

        assert SimpleHandler not in container
        assert container.resolve(SimpleHandler) is None

    def test_contains(self):
        container = HandlerContainer()
        container.register(SimpleHandler)

        assert SimpleHandler in container
        assert OrderCreatedHandler not in container

    def test_factory_errors_propagate(self):
        container = HandlerContainer()
        container.register(SimpleHandler, MagicMock(side_effect=RuntimeError("boom")))

        with pytest.raises(RuntimeError):
            container.resolve(SimpleHandler)
