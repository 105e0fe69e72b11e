"""Unit tests for event bus configuration."""

import pytest
from pydantic import ValidationError

from eventbus.configuration import EventBusSettings, Settings, get_settings
from eventbus.configuration.base import BaseBusSettings

pytestmark = pytest.mark.unit


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "EVENT_BUS_EVENT_NAME_SUFFIX",
        "EVENT_BUS_DEFAULT_TOPIC_NAME",
        "EVENT_BUS_CONNECTION_RETRY_COUNT",
        "EVENT_BUS_MAX_CONCURRENT_CALLS",
        "EVENT_BUS_ACK_WHEN_NO_SUBSCRIBERS",
        "PREFIX",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


class TestEventBusSettings:
    def test_defaults(self, clean_env):
        settings = EventBusSettings(_env_file=None)

        assert settings.EVENT_NAME_SUFFIX == "IntegrationEvent"
        assert settings.DEFAULT_TOPIC_NAME == "SellingProjectEventBus"
        assert settings.CONNECTION_RETRY_COUNT == 5
        assert settings.MAX_CONCURRENT_CALLS == 10
        assert settings.ACK_WHEN_NO_SUBSCRIBERS is True

    def test_reads_prefixed_environment(self, clean_env):
        clean_env.setenv("EVENT_BUS_DEFAULT_TOPIC_NAME", "OrdersTopic")
        clean_env.setenv("EVENT_BUS_CONNECTION_RETRY_COUNT", "2")
        clean_env.setenv("EVENT_BUS_ACK_WHEN_NO_SUBSCRIBERS", "false")

        settings = EventBusSettings(_env_file=None)

        assert settings.DEFAULT_TOPIC_NAME == "OrdersTopic"
        assert settings.CONNECTION_RETRY_COUNT == 2
        assert settings.ACK_WHEN_NO_SUBSCRIBERS is False

    def test_rejects_invalid_concurrency(self, clean_env):
        clean_env.setenv("EVENT_BUS_MAX_CONCURRENT_CALLS", "0")

        with pytest.raises(ValidationError):
            EventBusSettings(_env_file=None)

    def test_settings_are_immutable(self, bus_settings):
        with pytest.raises(ValidationError):
            bus_settings.DEFAULT_TOPIC_NAME = "Other"


class TestSettings:
    def test_event_bus_section_is_created(self, clean_env):
        clean_env.setenv("EVENT_BUS_EVENT_NAME_SUFFIX", "Event")

        settings = Settings()

        assert settings.event_bus.EVENT_NAME_SUFFIX == "Event"

    def test_is_production_without_prefix(self, clean_env):
        assert Settings().is_production

    def test_not_production_with_prefix(self, clean_env):
        clean_env.setenv("PREFIX", "dev-")

        assert not Settings().is_production

    def test_get_settings_is_cached(self, clean_env):
        assert get_settings() is get_settings()

    def test_explicit_event_bus_section_is_kept(self, settings_factory):
        bus_settings = settings_factory(DEFAULT_TOPIC_NAME="Custom")

        settings = Settings(event_bus=bus_settings)

        assert settings.event_bus.DEFAULT_TOPIC_NAME == "Custom"

    def test_settings_share_section_base_config(self, clean_env):
        clean_env.setenv("UNRELATED_VARIABLE", "ignored")

        settings = Settings(UNRELATED_VARIABLE="ignored")

        assert isinstance(settings, BaseBusSettings)
        assert not hasattr(settings, "UNRELATED_VARIABLE")
        with pytest.raises(ValidationError):
            settings.LOG_LEVEL = "DEBUG"
