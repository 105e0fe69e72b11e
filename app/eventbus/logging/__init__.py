"""Structured logging for the event bus.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_module_logger(): Get a logger for the calling module
    - bind_message_context(): Context manager for message-scoped logging
    - get_message_context(): Get the currently bound message context
    - clear_message_context(): Clear all message context

Example:
    from eventbus.logging import get_module_logger, bind_message_context

    logger = get_module_logger()

    with bind_message_context(event_name="OrderCreated", message_id="abc"):
        logger.info("processing_message")
"""

from eventbus.logging.setup import configure_logging, get_module_logger
from eventbus.logging.context import (
    bind_message_context,
    clear_message_context,
    get_message_context,
)
from eventbus.logging.formatters import (
    REDACTED,
    SECRET_KEY_FRAGMENTS,
    add_bus_identity,
    redact_broker_secrets,
    summarize_payloads,
)

__all__ = [
    "configure_logging",
    "get_module_logger",
    "bind_message_context",
    "get_message_context",
    "clear_message_context",
    "redact_broker_secrets",
    "summarize_payloads",
    "add_bus_identity",
    "REDACTED",
    "SECRET_KEY_FRAGMENTS",
]
