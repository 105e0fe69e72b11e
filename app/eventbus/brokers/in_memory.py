"""In-process broker adapter.

Models a topic/subscription broker: one topic, one subscription per
subscribed event name (named ``{app}.{event}``) and a label rule per
subscription. Messages are delivered on a worker pool; abandoned messages
are redelivered until MAX_DELIVERY_COUNT, then dead-lettered.

Used for local development and tests, and as the reference for the
provisioning routine broker adapters implement.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from eventbus.brokers.base import BrokerAdapter, BrokerMessage
from eventbus.brokers.factory import register_broker_adapter
from eventbus.configuration import EventBusSettings
from eventbus.dispatch.outcomes import ProcessingOutcome
from eventbus.exceptions import BrokerError, MessagingEntityNotFoundError

DEFAULT_RULE_NAME = "$Default"


@dataclass
class _Subscription:
    name: str
    rules: Dict[str, Optional[str]] = field(default_factory=dict)
    backlog: List[BrokerMessage] = field(default_factory=list)
    dead_letters: List[Tuple[BrokerMessage, str]] = field(default_factory=list)

    def matches(self, label: str) -> bool:
        # A rule with no label filter accepts everything
        return any(f is None or f == label for f in self.rules.values())


class InMemoryNamespace:
    """Emulated broker namespace holding topics, subscriptions and rules.

    Management calls mirror a broker management client: existence checks,
    create calls that fail on duplicates and delete calls that raise
    MessagingEntityNotFoundError for missing entities.
    """

    def __init__(self) -> None:
        self._topics: Dict[str, Dict[str, _Subscription]] = {}
        self._lock = threading.Lock()

    def topic_exists(self, topic: str) -> bool:
        with self._lock:
            return topic in self._topics

    def create_topic(self, topic: str) -> None:
        with self._lock:
            if topic in self._topics:
                raise BrokerError(f"Topic '{topic}' already exists")
            self._topics[topic] = {}

    def subscription_exists(self, topic: str, subscription: str) -> bool:
        with self._lock:
            return subscription in self._topics.get(topic, {})

    def create_subscription(self, topic: str, subscription: str) -> None:
        """Create a subscription with the default catch-all rule."""
        with self._lock:
            subs = self._get_topic(topic)
            if subscription in subs:
                raise BrokerError(f"Subscription '{subscription}' already exists")
            subs[subscription] = _Subscription(
                name=subscription, rules={DEFAULT_RULE_NAME: None}
            )

    def rule_exists(self, topic: str, subscription: str, rule: str) -> bool:
        with self._lock:
            sub = self._topics.get(topic, {}).get(subscription)
            return sub is not None and rule in sub.rules

    def add_rule(self, topic: str, subscription: str, rule: str, label: str) -> None:
        with self._lock:
            sub = self._get_subscription(topic, subscription)
            if rule in sub.rules:
                raise BrokerError(f"Rule '{rule}' already exists on '{subscription}'")
            sub.rules[rule] = label

    def remove_rule(self, topic: str, subscription: str, rule: str) -> None:
        with self._lock:
            sub = self._get_subscription(topic, subscription)
            if rule not in sub.rules:
                raise MessagingEntityNotFoundError(f"{topic}/{subscription}/{rule}")
            del sub.rules[rule]

    def get_rules(self, topic: str, subscription: str) -> Dict[str, Optional[str]]:
        with self._lock:
            return dict(self._get_subscription(topic, subscription).rules)

    def route(self, topic: str, label: str) -> List[str]:
        """Names of the subscriptions whose rules accept a label."""
        with self._lock:
            return [
                name
                for name, sub in self._get_topic(topic).items()
                if sub.matches(label)
            ]

    def enqueue(self, topic: str, subscription: str, message: BrokerMessage) -> None:
        with self._lock:
            self._get_subscription(topic, subscription).backlog.append(message)

    def take_backlog(self, topic: str, subscription: str) -> List[BrokerMessage]:
        with self._lock:
            sub = self._get_subscription(topic, subscription)
            backlog, sub.backlog = sub.backlog, []
            return backlog

    def dead_letter(
        self, topic: str, subscription: str, message: BrokerMessage, reason: str
    ) -> None:
        with self._lock:
            self._get_subscription(topic, subscription).dead_letters.append(
                (message, reason)
            )

    def dead_letters(
        self, topic: str, subscription: str
    ) -> List[Tuple[BrokerMessage, str]]:
        with self._lock:
            return list(self._get_subscription(topic, subscription).dead_letters)

    def _get_topic(self, topic: str) -> Dict[str, _Subscription]:
        try:
            return self._topics[topic]
        except KeyError:
            raise MessagingEntityNotFoundError(topic) from None

    def _get_subscription(self, topic: str, subscription: str) -> _Subscription:
        try:
            return self._get_topic(topic)[subscription]
        except KeyError:
            raise MessagingEntityNotFoundError(f"{topic}/{subscription}") from None


@register_broker_adapter("in_memory")
class InMemoryBrokerAdapter(BrokerAdapter):
    """Broker adapter delivering messages in-process on a worker pool.

    Example:
        adapter = InMemoryBrokerAdapter(settings.event_bus)
        bus = EventBus(settings.event_bus, adapter, container)
        bus.subscribe(OrderCreatedIntegrationEvent, OrderCreatedHandler)
        bus.publish(OrderCreatedIntegrationEvent(order_id="o-1"))
        adapter.wait_until_idle(timeout=5)
    """

    def __init__(
        self,
        settings: EventBusSettings,
        namespace: Optional[InMemoryNamespace] = None,
    ):
        super().__init__(settings)
        self.namespace = namespace or InMemoryNamespace()
        self._topic = settings.DEFAULT_TOPIC_NAME
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._pending = 0
        self._closed = False
        self._draining = False
        # Marks worker threads while they run a delivery
        self._local = threading.local()
        self._receiving: set[str] = set()
        self._stats = {
            "sent": 0,
            "completed": 0,
            "abandoned": 0,
            "dead_lettered": 0,
        }
        self._ensure_topic()

    def start(self) -> None:
        self._get_or_create_executor()

    def close(self, wait: bool = True) -> None:
        """Stop delivering messages.

        New publishes are rejected as soon as close() is called; handlers
        that are already running may still publish. With wait=True, in-flight
        deliveries (including their redeliveries) are drained before the
        worker pool shuts down. Idempotent.

        Raises:
            BrokerError: If called with wait=True from a message handler,
                which would wait for its own delivery
        """
        if wait:
            self._check_not_in_delivery("close(wait=True)")
        with self._lock:
            self._draining = True
        if wait:
            self.wait_until_idle()
        with self._lock:
            executor, self._executor = self._executor, None
            self._closed = True
            self._receiving.clear()
        if executor is not None:
            executor.shutdown(wait=wait)
        self._logger.info("broker_adapter_closed", wait=wait)

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no delivery is in flight.

        Returns:
            True if idle, False if the timeout expired first

        Raises:
            BrokerError: If called from a message handler
        """
        self._check_not_in_delivery("wait_until_idle()")
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            stats: Dict[str, Any] = dict(self._stats)
            stats["in_flight"] = self._pending
            stats["draining"] = self._draining
            stats["receiving"] = sorted(self._receiving)
        return stats

    def send(self, message: BrokerMessage) -> None:
        with self._lock:
            rejected = self._closed or (self._draining and not self._in_delivery())
        if rejected:
            raise BrokerError("Broker adapter is closed")

        subscriptions = self.namespace.route(self._topic, message.label)
        with self._lock:
            self._stats["sent"] += 1
            receiving = [s for s in subscriptions if s in self._receiving]

        for subscription in subscriptions:
            if subscription in receiving:
                self._submit(subscription, message)
            else:
                self.namespace.enqueue(self._topic, subscription, message)

        self._logger.debug(
            "message_sent",
            event_name=message.label,
            message_id=message.message_id,
            subscriptions=subscriptions,
        )

    def ensure_routing(self, event_name: str) -> None:
        subscription = self.subscription_name(event_name)
        self._ensure_topic()

        if not self.namespace.subscription_exists(self._topic, subscription):
            self.namespace.create_subscription(self._topic, subscription)
            self._remove_default_rule(subscription)

        if not self.namespace.rule_exists(self._topic, subscription, event_name):
            self.namespace.add_rule(self._topic, subscription, event_name, event_name)

        with self._lock:
            newly_receiving = subscription not in self._receiving
            self._receiving.add(subscription)

        if newly_receiving:
            for message in self.namespace.take_backlog(self._topic, subscription):
                self._submit(subscription, message)

        self._logger.info(
            "routing_ensured",
            event_name=event_name,
            subscription=subscription,
        )

    def teardown_routing(self, event_name: str) -> None:
        subscription = self.subscription_name(event_name)
        try:
            self.namespace.remove_rule(self._topic, subscription, event_name)
        except MessagingEntityNotFoundError as e:
            self._logger.warning(
                "messaging_entity_not_found",
                event_name=event_name,
                entity=e.entity_path,
            )

        with self._lock:
            self._receiving.discard(subscription)

        self._logger.info(
            "routing_torn_down",
            event_name=event_name,
            subscription=subscription,
        )

    def dead_letters(self, event_name: str) -> List[Tuple[BrokerMessage, str]]:
        """Dead-lettered messages and reasons for an event's subscription."""
        return self.namespace.dead_letters(
            self._topic, self.subscription_name(event_name)
        )

    def _ensure_topic(self) -> None:
        if not self.namespace.topic_exists(self._topic):
            self.namespace.create_topic(self._topic)

    def _remove_default_rule(self, subscription: str) -> None:
        try:
            self.namespace.remove_rule(self._topic, subscription, DEFAULT_RULE_NAME)
        except MessagingEntityNotFoundError:
            self._logger.warning(
                "messaging_entity_not_found",
                entity=DEFAULT_RULE_NAME,
                subscription=subscription,
            )

    def _get_or_create_executor(self) -> Optional[ThreadPoolExecutor]:
        with self._lock:
            if self._closed:
                return None
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._settings.MAX_CONCURRENT_CALLS,
                    thread_name_prefix="eventbus-delivery",
                )
                self._logger.debug(
                    "delivery_executor_created",
                    max_workers=self._settings.MAX_CONCURRENT_CALLS,
                )
            return self._executor

    def _submit(self, subscription: str, message: BrokerMessage) -> None:
        executor = self._get_or_create_executor()
        if executor is None:
            self.namespace.enqueue(self._topic, subscription, message)
            return
        with self._lock:
            self._pending += 1
        try:
            executor.submit(self._deliver, subscription, message)
        except RuntimeError:
            # Executor shut down between lookup and submit
            self._release()
            self.namespace.enqueue(self._topic, subscription, message)

    def _in_delivery(self) -> bool:
        return getattr(self._local, "delivering", False)

    def _check_not_in_delivery(self, operation: str) -> None:
        if self._in_delivery():
            raise BrokerError(
                f"{operation} called from a message handler would wait for "
                "its own delivery"
            )

    def _deliver(self, subscription: str, message: BrokerMessage) -> None:
        self._local.delivering = True
        try:
            try:
                outcome = self.handle_delivery(message)
            except Exception as e:
                self._logger.exception(
                    "message_delivery_failed",
                    event_name=message.label,
                    message_id=message.message_id,
                    error=str(e),
                )
                self._abandon(subscription, message, reason=type(e).__name__)
                return

            if self.should_acknowledge(outcome):
                self._complete(message, outcome)
            else:
                self._abandon(subscription, message, reason=outcome.status.value)
        finally:
            self._local.delivering = False
            self._release()

    def _complete(self, message: BrokerMessage, outcome: ProcessingOutcome) -> None:
        with self._lock:
            self._stats["completed"] += 1
        self._logger.debug(
            "message_completed",
            event_name=message.label,
            message_id=message.message_id,
            status=outcome.status.value,
        )

    def _abandon(self, subscription: str, message: BrokerMessage, reason: str) -> None:
        if message.delivery_count >= self._settings.MAX_DELIVERY_COUNT:
            self.namespace.dead_letter(self._topic, subscription, message, reason)
            with self._lock:
                self._stats["dead_lettered"] += 1
            self._logger.error(
                "message_dead_lettered",
                event_name=message.label,
                message_id=message.message_id,
                delivery_count=message.delivery_count,
                reason=reason,
            )
            return

        with self._lock:
            self._stats["abandoned"] += 1
            still_receiving = subscription in self._receiving
        self._logger.warning(
            "message_abandoned",
            event_name=message.label,
            message_id=message.message_id,
            delivery_count=message.delivery_count,
            reason=reason,
        )
        if still_receiving:
            self._submit(subscription, message.redelivered())
        else:
            self.namespace.enqueue(self._topic, subscription, message.redelivered())

    def _release(self) -> None:
        with self._idle:
            self._pending -= 1
            if self._pending == 0:
                self._idle.notify_all()
