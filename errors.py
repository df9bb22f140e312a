"""
Lookup error kinds.

The message of each error is what the user sees in the error banner.
"""


class LookupFailed(Exception):
    """Base class for geocoding and weather lookup failures."""

    default_message = "Lookup failed"

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return self.args[0]


class Cancelled(LookupFailed):
    """The caller cancelled the request before it completed. Never shown to the user."""

    default_message = "Request cancelled"


class NotFound(LookupFailed):
    default_message = "City not found. Please try again."


class ServiceUnavailable(LookupFailed):
    """The endpoint answered with a non-success status."""

    default_message = "Service unavailable"


class TransportError(LookupFailed):
    """DNS failure, timeout, connection reset or an unreadable body."""

    default_message = "Network error. Please check your connection."
