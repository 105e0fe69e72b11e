"""Event bus configuration module - public API.

Configuration is managed with Pydantic BaseSettings and read from the
environment (or a .env file) once per process.

Exports:
    get_settings: Cached Settings singleton
    Settings: Main settings class (for testing/overrides)
    EventBusSettings: Event bus settings class

Example:
    ```python
    from eventbus.configuration import get_settings

    settings = get_settings()
    retries = settings.event_bus.CONNECTION_RETRY_COUNT
    ```
"""

from eventbus.configuration.event_bus import EventBusSettings
from eventbus.configuration.settings import Settings, get_settings

__all__ = ["EventBusSettings", "Settings", "get_settings"]
