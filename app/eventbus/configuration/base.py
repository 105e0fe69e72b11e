"""Shared base class for settings modules."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseBusSettings(BaseSettings):
    """Base class shared by Settings and its sections.

    Settings are read once from the environment (and an optional .env file)
    and are immutable afterwards.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )
