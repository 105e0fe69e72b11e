"""Event name normalization.

Canonical event names are the routing keys shared by publishers and
subscribers: the event class name with the configured prefix and suffix
removed (``OrderCreatedIntegrationEvent`` -> ``OrderCreated``).
"""

from eventbus.exceptions import ConfigurationError


class EventNameNormalizer:
    """Strips a configured prefix and suffix from raw event names.

    Stripping repeats until the name no longer starts with the prefix or ends
    with the suffix, so every canonical name is a fixed point of normalize().
    """

    def __init__(self, prefix: str = "", suffix: str = ""):
        self._prefix = prefix or ""
        self._suffix = suffix or ""

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def suffix(self) -> str:
        return self._suffix

    def normalize(self, raw_name: str) -> str:
        """Return the canonical form of a raw event name.

        Args:
            raw_name: Event type name or broker label

        Returns:
            Name without the configured prefix and suffix. May be empty when
            the raw name consists only of the prefix and/or suffix.
        """
        name = raw_name
        if self._prefix:
            while name.startswith(self._prefix):
                name = name[len(self._prefix) :]
        if self._suffix:
            while name.endswith(self._suffix):
                name = name[: -len(self._suffix)]
        return name

    def require(self, raw_name: str) -> str:
        """Normalize a name and reject an empty result.

        Raises:
            ConfigurationError: If the canonical name is empty
        """
        name = self.normalize(raw_name)
        if not name:
            raise ConfigurationError(
                f"Event name '{raw_name}' normalizes to an empty name"
            )
        return name

    def for_type(self, event_type: type) -> str:
        """Canonical event name for an event class."""
        return self.require(event_type.__name__)

    def __repr__(self) -> str:
        return f"EventNameNormalizer(prefix={self._prefix!r}, suffix={self._suffix!r})"
