"""Integration event serialization.

The wire format is UTF-8 encoded JSON produced by pydantic from the event
model, with PascalCase field names.
"""

from typing import Protocol, Type, TypeVar

from pydantic import ValidationError

from eventbus.events.models import IntegrationEvent
from eventbus.exceptions import DeserializationError

TEvent = TypeVar("TEvent", bound=IntegrationEvent)


class EventSerializer(Protocol):
    """Serializer interface used by the bus and the dispatch pipeline."""

    def serialize(self, event: IntegrationEvent) -> bytes:
        """Encode an event into a message body."""
        ...

    def deserialize(self, body: bytes, payload_type: Type[TEvent]) -> TEvent:
        """Decode a message body into an event.

        Raises:
            DeserializationError: If the body is not a valid payload_type
        """
        ...


class JsonEventSerializer:
    """JSON serializer backed by pydantic models.

    Deserialization validates the body against the payload model and keeps
    the original Id and CreateDate of the event.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def serialize(self, event: IntegrationEvent) -> bytes:
        return event.model_dump_json(by_alias=True).encode(self.encoding)

    def deserialize(self, body: bytes, payload_type: Type[TEvent]) -> TEvent:
        try:
            text = body.decode(self.encoding) if isinstance(body, bytes) else body
            return payload_type.model_validate_json(text)
        except UnicodeDecodeError as e:
            raise DeserializationError(
                f"Message body is not valid {self.encoding}: {e}",
                payload_type=payload_type,
            ) from e
        except ValidationError as e:
            raise DeserializationError(
                f"Invalid {payload_type.__name__} payload: "
                f"{e.error_count()} validation error(s)",
                payload_type=payload_type,
            ) from e
