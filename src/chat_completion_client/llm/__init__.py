"""Chat completion request building and delivery."""

from .base import BaseTransport, CredentialProvider, TransportRequest, TransportResponse
from .builder import RequestBuilder
from .client import CompletionClient
from .credentials import EnvCredentials, StaticCredentials
from .decoding import decode_response
from .errors import ChatClientError, ConfigError, DecodeError, TransportError
from .transport import HttpxTransport
from .types import ChatMessage, Choice, CompletionResult, GenerationConfig, Role, Usage, few_shot

__all__ = [
    "BaseTransport",
    "CredentialProvider",
    "TransportRequest",
    "TransportResponse",
    "RequestBuilder",
    "CompletionClient",
    "EnvCredentials",
    "StaticCredentials",
    "decode_response",
    "ChatClientError",
    "ConfigError",
    "DecodeError",
    "TransportError",
    "HttpxTransport",
    "ChatMessage",
    "Choice",
    "CompletionResult",
    "GenerationConfig",
    "Role",
    "Usage",
    "few_shot",
]
