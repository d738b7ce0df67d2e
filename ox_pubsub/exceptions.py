"""Custom exceptions for the OX pubsub engine."""


class PubSubError(Exception):
    """Base exception for pubsub engine errors."""
    pass


class ConfigurationError(PubSubError):
    """Configuration-related errors."""
    pass


class OptionError(PubSubError, ValueError):
    """An option value cannot be encoded onto the wire."""
    pass


class DocumentError(PubSubError):
    """A document lacks an element or attribute the protocol requires."""
    pass


class UnknownEventError(PubSubError, KeyError):
    """Handler registration for an event name that does not exist."""
    pass
