"""Dispatch pipeline.

Turns a delivered message (raw event name + body) into handler invocations
and reports a ProcessingOutcome. Delivery is best-effort per handler: a
failing handler never prevents its siblings from running.
"""

from typing import Any, Dict, List, Type

from eventbus.dispatch.outcomes import ProcessingOutcome
from eventbus.events.models import IntegrationEvent
from eventbus.exceptions import DeserializationError, UnknownEventTypeError
from eventbus.logging import bind_message_context, get_module_logger
from eventbus.naming import EventNameNormalizer
from eventbus.serialization import EventSerializer
from eventbus.services.locator import ServiceLocator
from eventbus.subscriptions.registry import SubscriptionRegistry

logger = get_module_logger()


class DispatchPipeline:
    """Deserializes delivered messages and fans them out to handlers.

    The pipeline holds no lock while handlers run; only registry reads are
    synchronized (through the registry's snapshots), so any number of broker
    worker threads may call process() concurrently.

    Example:
        pipeline = DispatchPipeline(registry, JsonEventSerializer(), container)
        outcome = pipeline.process("OrderCreated", body)
        if outcome.is_success:
            receiver.complete(message)
    """

    def __init__(
        self,
        registry: SubscriptionRegistry,
        serializer: EventSerializer,
        locator: ServiceLocator,
        normalizer: EventNameNormalizer | None = None,
    ):
        self._registry = registry
        self._serializer = serializer
        self._locator = locator
        self._normalizer = normalizer or registry.normalizer

    @property
    def registry(self) -> SubscriptionRegistry:
        return self._registry

    def process(self, raw_event_name: str, payload: bytes) -> ProcessingOutcome:
        """Dispatch one message to every handler registered for its event.

        Args:
            raw_event_name: Event name as carried by the broker message
            payload: Serialized event body

        Returns:
            ProcessingOutcome describing what happened
        """
        event_name = self._normalizer.normalize(raw_event_name)

        with bind_message_context(event_name=event_name):
            if not event_name:
                logger.warning("event_name_empty", raw_event_name=raw_event_name)
                return ProcessingOutcome.no_subscribers(event_name)

            registrations = self._registry.get_handlers(event_name)
            if not registrations:
                logger.info("event_has_no_subscribers")
                return ProcessingOutcome.no_subscribers(event_name)

            try:
                payload_type = self._registry.get_payload_type(event_name)
            except UnknownEventTypeError as e:
                logger.error("payload_type_missing", error=str(e))
                return ProcessingOutcome.internal_error(event_name, e)

            payloads: Dict[Type[IntegrationEvent], IntegrationEvent] = {}
            try:
                for payload_cls in {payload_type, *(r.payload_type for r in registrations)}:
                    payloads[payload_cls] = self._serializer.deserialize(
                        payload, payload_cls
                    )
            except DeserializationError as e:
                e.event_name = event_name
                logger.error(
                    "event_deserialization_failed",
                    payload_type=getattr(e.payload_type, "__name__", None),
                    error=str(e),
                )
                return ProcessingOutcome.deserialization_error(event_name, e)

            failed: List[Any] = []
            handled = 0
            for registration in registrations:
                event = payloads[registration.payload_type]
                try:
                    handler = self._locator.resolve(registration.handler_id)
                    if handler is None:
                        logger.warning(
                            "event_handler_unresolved",
                            handler=registration.handler_name,
                        )
                        continue
                    registration.invoke(handler, event)
                    handled += 1
                except Exception as e:
                    failed.append(registration.handler_id)
                    logger.error(
                        "event_handler_failed",
                        handler=registration.handler_name,
                        event_id=str(event.id),
                        error=str(e),
                        exc_info=True,
                    )

            if failed:
                logger.warning(
                    "event_dispatch_partial_failure",
                    failed_count=len(failed),
                    handled_count=handled,
                )
                return ProcessingOutcome.partial_failure(event_name, failed, handled)

            logger.info("event_dispatched", handled_count=handled)
            return ProcessingOutcome.success(event_name, handled)
