"""Error types raised or delivered by the chat completion client."""

from typing import Optional


class ChatClientError(Exception):
    """Base class for every error this package produces."""


class ConfigError(ChatClientError, ValueError):
    """A generation parameter or message failed local validation.

    Raised synchronously while building a request, before any network call.
    """


class TransportError(ChatClientError):
    """The exchange with the service did not complete.

    Covers connection failures, timeouts and non-2xx responses. ``status`` is
    set when the service answered with an error status.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class DecodeError(ChatClientError):
    """The service answered but the body was not a usable completion."""

    def __init__(self, message: str, body: Optional[str] = None):
        super().__init__(message)
        # Keep only a short excerpt for diagnostics
        self.body = body[:500] if body else body
