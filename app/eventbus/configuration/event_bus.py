"""Event bus settings."""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from eventbus.configuration.base import BaseBusSettings


class EventBusSettings(BaseBusSettings):
    """Process-wide event bus configuration snapshot.

    Environment Variables:
        EVENT_BUS_CONNECTION_STRING: Broker connection descriptor
        EVENT_BUS_EVENT_NAME_PREFIX: Prefix stripped from event type names (default: "")
        EVENT_BUS_EVENT_NAME_SUFFIX: Suffix stripped from event type names
            (default: "IntegrationEvent")
        EVENT_BUS_SUBSCRIBER_CLIENT_APP_NAME: Name of the subscribing application,
            used to build broker subscription names
        EVENT_BUS_DEFAULT_TOPIC_NAME: Topic all events are published to
            (default: "SellingProjectEventBus")
        EVENT_BUS_CONNECTION_RETRY_COUNT: Send retries on connection errors (default: 5)
        EVENT_BUS_RETRY_BACKOFF_SECONDS: Base delay for exponential send backoff
            (default: 0.5s)
        EVENT_BUS_BROKER_TYPE: Registered broker adapter name (default: "in_memory")
        EVENT_BUS_MAX_CONCURRENT_CALLS: Concurrent message handler invocations (default: 10)
        EVENT_BUS_MAX_DELIVERY_COUNT: Deliveries before a message is dead-lettered
            (default: 10)
        EVENT_BUS_ACK_WHEN_NO_SUBSCRIBERS: Complete messages nobody handles (default: True)

    Example:
        ```python
        from eventbus.configuration import get_settings

        settings = get_settings()
        topic = settings.event_bus.DEFAULT_TOPIC_NAME
        ```
    """

    model_config = SettingsConfigDict(env_prefix="EVENT_BUS_")

    CONNECTION_STRING: str = Field(
        default="",
        description="Broker connection descriptor",
    )
    EVENT_NAME_PREFIX: str = Field(
        default="",
        description="Prefix removed from event type names to build routing keys",
    )
    EVENT_NAME_SUFFIX: str = Field(
        default="IntegrationEvent",
        description="Suffix removed from event type names to build routing keys",
    )
    SUBSCRIBER_CLIENT_APP_NAME: str = Field(
        default="",
        description="Subscribing application name, prefixes broker subscription names",
    )
    DEFAULT_TOPIC_NAME: str = Field(
        default="SellingProjectEventBus",
        description="Topic all integration events are published to",
    )
    CONNECTION_RETRY_COUNT: int = Field(
        default=5,
        ge=0,
        description="Number of send retries on broker connection errors",
    )
    RETRY_BACKOFF_SECONDS: float = Field(
        default=0.5,
        ge=0,
        description="Base delay for exponential send backoff (seconds)",
    )
    BROKER_TYPE: str = Field(
        default="in_memory",
        description="Name of the registered broker adapter to use",
    )
    MAX_CONCURRENT_CALLS: int = Field(
        default=10,
        ge=1,
        description="Maximum concurrent message handler invocations",
    )
    MAX_DELIVERY_COUNT: int = Field(
        default=10,
        ge=1,
        description="Deliveries attempted before a message is dead-lettered",
    )
    ACK_WHEN_NO_SUBSCRIBERS: bool = Field(
        default=True,
        description="Complete messages for which no handler is registered",
    )
