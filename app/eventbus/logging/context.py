"""Per-message context binding for structured logging.

Binds delivery metadata to every log entry emitted while a message is being
dispatched, across the adapter, the pipeline and the handlers themselves.

Usage:
    from eventbus.logging import bind_message_context

    with bind_message_context(event_name="OrderCreated", message_id="abc"):
        logger.info("handling_message")
"""

from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_message_context(
    event_name: Optional[str] = None,
    message_id: Optional[str] = None,
    delivery_count: Optional[int] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind message-scoped context to all logs within the context manager.

    Args:
        event_name: Canonical event name of the message.
        message_id: Broker message identifier.
        delivery_count: How many times the broker has delivered the message.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        None - context is bound to structlog's context vars.
    """
    context: dict[str, Any] = {}

    if event_name is not None:
        context["event_name"] = event_name

    if message_id is not None:
        context["message_id"] = message_id

    if delivery_count is not None:
        context["delivery_count"] = delivery_count

    context.update(extra_context)

    tokens = structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)


def get_message_context() -> dict[str, Any]:
    """Get the message context currently bound to the logging context.

    Returns:
        A copy of the bound context variables.
    """
    return dict(structlog.contextvars.get_contextvars())


def clear_message_context() -> None:
    """Clear all message-scoped context from the logging context."""
    structlog.contextvars.clear_contextvars()
