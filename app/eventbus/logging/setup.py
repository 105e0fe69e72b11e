"""Structlog configuration for the event bus.

Usage:
    from eventbus.logging import configure_logging, get_module_logger

    configure_logging()                # once, at process start
    logger = get_module_logger()       # per module
    logger.info("subscription_added", event_name="OrderCreated")

Dependencies:
    - eventbus.configuration.Settings
"""

import inspect
import logging
import sys
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger

from eventbus.configuration import Settings, get_settings
from eventbus.logging.formatters import (
    add_bus_identity,
    redact_broker_secrets,
    summarize_payloads,
)

_PACKAGE = "eventbus"


def _is_test_environment() -> bool:
    return "pytest" in sys.modules


def _silence() -> BoundLogger:
    # Bound loggers still need a processor chain; nothing is emitted because
    # the root level sits above CRITICAL.
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=logging.CRITICAL + 1, force=True)
    return structlog.stdlib.get_logger()


def configure_logging(
    settings: Optional[Settings] = None,
    log_level: Optional[str] = None,
    json_output: Optional[bool] = None,
) -> BoundLogger:
    """Configure structlog for publishing and dispatch.

    Every entry carries the message context bound by bind_message_context()
    (event name, message id, delivery count), the topic and subscriber app
    from the event bus settings, and callsite information. Broker credentials
    are redacted and message bodies summarized before rendering.

    Output is silenced entirely under pytest.

    Args:
        settings: Application settings; defaults to get_settings().
        log_level: Overrides settings.LOG_LEVEL.
        json_output: Overrides the renderer choice; JSON by default in
            production, console otherwise.

    Returns:
        Configured logger instance
    """
    if _is_test_environment():
        return _silence()

    settings = settings or get_settings()
    use_json = settings.is_production if json_output is None else json_output
    bus = settings.event_bus

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_bus_identity(bus.DEFAULT_TOPIC_NAME, bus.SUBSCRIBER_CLIENT_APP_NAME),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.THREAD_NAME,
            ]
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_broker_secrets(),
        summarize_payloads(),
        (
            structlog.processors.JSONRenderer()
            if use_json
            else structlog.dev.ConsoleRenderer()
        ),
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    level = (log_level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level, logging.INFO),
    )

    return structlog.stdlib.get_logger()


# Module-level logger (auto-configured on import)
logger: BoundLogger = configure_logging()


def get_module_logger() -> BoundLogger:
    """Get a logger bound to the calling module.

    Inside the package the component is the module path below ``eventbus``
    (``eventbus.dispatch.pipeline`` -> ``dispatch.pipeline``); elsewhere it is
    the last segment of the module name.

    Example:
        # In eventbus/subscriptions/registry.py
        logger = get_module_logger()
        # {"component": "subscriptions.registry",
        #  "module_path": "eventbus.subscriptions.registry"}
    """
    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    module = inspect.getmodule(caller) if caller is not None else None
    if module is None:
        return logger.bind(component="unknown")

    module_name = module.__name__
    prefix = _PACKAGE + "."
    if module_name.startswith(prefix):
        component = module_name[len(prefix) :]
    else:
        component = module_name.rsplit(".", 1)[-1]
    return logger.bind(component=component, module_path=module_name)
