"""Abstract collaborators used by the completion client."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class TransportRequest:
    """An HTTP exchange to perform."""
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


@dataclass(frozen=True)
class TransportResponse:
    """The raw outcome of an HTTP exchange."""
    status: int
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class BaseTransport(ABC):
    """Abstract interface for HTTP backends."""

    @abstractmethod
    async def send(self, request: TransportRequest) -> TransportResponse:
        """Perform one exchange.

        Args:
            request: Method, URL, headers and serialized body.

        Returns:
            The response status and body, whatever the status code.

        Raises:
            TransportError: The exchange could not be completed.
        """
        ...

    async def close(self):
        """Release any pooled connections."""


class CredentialProvider(ABC):
    """Supplies the bearer token for the Authorization header."""

    @abstractmethod
    def get_token(self) -> Optional[str]:
        ...
