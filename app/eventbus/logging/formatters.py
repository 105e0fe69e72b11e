"""Structlog processors for event bus log entries.

Usage:
    from eventbus.logging.formatters import redact_broker_secrets
"""

import re
from typing import Any

# Key fragments whose values never reach the logs
SECRET_KEY_FRAGMENTS = frozenset(
    {
        "connection_string",
        "sharedaccesskey",
        "sas_token",
        "password",
        "secret",
        "token",
        "credential",
    }
)

# Credential segments embedded in broker connection strings and error texts
_CONNECTION_SECRET = re.compile(
    r"(SharedAccessKey|SharedAccessSignature|AccessKey|Password)=[^;\s]*",
    re.IGNORECASE,
)

REDACTED = "***REDACTED***"


def redact_broker_secrets(extra_fragments: frozenset[str] | None = None):
    """Create a processor that keeps broker credentials out of log entries.

    Values under secret-looking keys are replaced entirely. Credential
    segments inside other string values (``SharedAccessKey=...`` in an
    exception message, for instance) are replaced in place.

    Args:
        extra_fragments: Additional key fragments to treat as secret.

    Returns:
        A structlog processor function.
    """
    fragments = SECRET_KEY_FRAGMENTS | (extra_fragments or frozenset())

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        redacted = {}
        for key, value in event_dict.items():
            if value is not None and any(f in key.lower() for f in fragments):
                redacted[key] = REDACTED
            elif isinstance(value, str):
                redacted[key] = _CONNECTION_SECRET.sub(
                    lambda m: f"{m.group(1)}={REDACTED}", value
                )
            else:
                redacted[key] = value
        return redacted

    return processor


def summarize_payloads(max_length: int = 500):
    """Create a processor that keeps message bodies from flooding the logs.

    Raw ``bytes`` values are replaced by their size; strings longer than
    max_length are cut.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, (bytes, bytearray)):
                event_dict[key] = f"<{len(value)} bytes>"
            elif isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor


def add_bus_identity(topic: str, subscriber: str):
    """Create a processor stamping the topic and subscriber app on every entry."""

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.setdefault("topic", topic)
        if subscriber:
            event_dict.setdefault("subscriber", subscriber)
        return event_dict

    return processor
