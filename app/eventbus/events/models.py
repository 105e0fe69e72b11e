"""Integration event base model.

Integration events are immutable records exchanged across process
boundaries. Every event carries an identity and a creation timestamp that are
minted by the publisher and reconstructed verbatim on deserialization.
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IntegrationEvent(BaseModel):
    """Base class for all integration events.

    Subclasses declare their payload fields as ordinary pydantic fields.
    Serialized field names are PascalCase (``Id``, ``CreateDate``, ...);
    both PascalCase and snake_case names are accepted on input.

    Example:
        class OrderCreatedIntegrationEvent(IntegrationEvent):
            order_id: str
            buyer: str

        event = OrderCreatedIntegrationEvent(order_id="o-1", buyer="alice")
        bus.publish(event)
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_pascal,
        populate_by_name=True,
    )

    id: UUID = Field(default_factory=uuid4)
    """Globally unique event identity."""

    create_date: datetime = Field(default_factory=_utcnow)
    """When the event was created by the publisher."""
