"""Exceptions raised by the trial engine itself (providers raise ProviderError)."""


class CourtroomError(Exception):
    """Base exception for trial engine errors."""

    pass


class TrialConfigurationError(CourtroomError, ValueError):
    """Raised at trial start when the configuration cannot produce a verdict."""

    pass
