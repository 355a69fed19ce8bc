"""Exceptions raised for malformed availability requests.

These are validation failures, not verdicts: callers surface them as
form errors and must never read them as "unavailable".
"""


class AvailabilityError(Exception):
    """Base class for request validation failures."""


class InvalidRangeError(AvailabilityError):
    """Raised when a date range ends before it starts or covers no slot."""


class ConfigurationError(AvailabilityError):
    """Raised when an outfit has no sizes or the requested size is unknown."""
