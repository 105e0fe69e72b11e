"""Process-wide settings for applications embedding the event bus."""

from functools import lru_cache

from eventbus.configuration.base import BaseBusSettings
from eventbus.configuration.event_bus import EventBusSettings


class Settings(BaseBusSettings):
    """Top-level settings: logging knobs plus the event bus section.

    Environment Variables:
        PREFIX: Deployment prefix; empty in production
        LOG_LEVEL: Log level for configure_logging() (default: INFO)
        EVENT_BUS_*: See EventBusSettings

    Example:
        ```python
        from eventbus.configuration import get_settings

        settings = get_settings()
        bus = create_event_bus(settings.event_bus, locator=container)
        ```
    """

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"

    event_bus: EventBusSettings

    @property
    def is_production(self) -> bool:
        """True when no deployment prefix is set. Selects JSON log output."""
        return not self.PREFIX

    def __init__(self, **kwargs):
        # Sections read their own prefixed variables unless passed explicitly
        if "event_bus" not in kwargs:
            kwargs["event_bus"] = EventBusSettings()

        super().__init__(**kwargs)


@lru_cache
def get_settings() -> Settings:
    """Settings loaded once from the environment and cached for the process."""
    return Settings()
