"""Chat completion client with callback-based result delivery."""

import asyncio
import inspect
import json
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Mapping, Optional, Union

from .base import BaseTransport, CredentialProvider, TransportRequest, TransportResponse
from .builder import MessageLike, RequestBuilder
from .credentials import EnvCredentials
from .decoding import decode_response
from .errors import ConfigError, DecodeError, TransportError
from .transport import HttpxTransport
from .types import CompletionResult, GenerationConfig

if TYPE_CHECKING:
    from ..config import AppSettings

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"

Outcome = Union[CompletionResult, TransportError, DecodeError]
CompletionCallback = Callable[[Outcome], Union[None, Awaitable[None]]]


class OneShotCallback:
    """Wraps a caller's callback so it can be resolved only once."""

    def __init__(self, callback: CompletionCallback):
        self._callback = callback
        self.resolved = False

    async def resolve(self, outcome: Outcome):
        if self.resolved:
            raise RuntimeError("Completion callback was already resolved")
        self.resolved = True
        result = self._callback(outcome)
        if inspect.isawaitable(result):
            await result


def _error_detail(response: TransportResponse) -> str:
    """Pull the service's error message out of a failed response, if any."""
    try:
        data = json.loads(response.body)
        message = data["error"]["message"]
    except (ValueError, TypeError, KeyError):
        return response.body[:200].decode("utf-8", errors="replace")
    return str(message)


class CompletionClient:
    """Sends chat completion requests and reports outcomes to callbacks.

    The client holds one shared default ``GenerationConfig``. Per-call
    overrides are merged into a fresh copy, so the default never changes
    after construction.
    """

    def __init__(
        self,
        transport: BaseTransport,
        credentials: CredentialProvider,
        config: Optional[GenerationConfig] = None,
        *,
        url: str = DEFAULT_API_URL,
        builder: Optional[RequestBuilder] = None,
    ):
        self.transport = transport
        self.credentials = credentials
        self.config = config or GenerationConfig()
        self.url = url
        self.builder = builder or RequestBuilder()
        self._pending: set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: "AppSettings") -> "CompletionClient":
        """Wire a client from ``AppSettings``."""
        return cls(
            HttpxTransport(timeout=settings.request_timeout),
            EnvCredentials(settings.api_key_env),
            GenerationConfig(model=settings.model_name),
            url=settings.api_url,
            builder=RequestBuilder(include_defaults=settings.include_defaults),
        )

    def config_for(self, overrides: Optional[Mapping[str, Any]] = None) -> GenerationConfig:
        return self.config.merged(overrides)

    def complete(
        self,
        conversation: Iterable[MessageLike],
        callback: CompletionCallback,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Start a completion and return without waiting for the response.

        ``callback`` is called exactly once with a ``CompletionResult``, a
        ``TransportError`` or a ``DecodeError``. It may be a coroutine function.

        Raises:
            ConfigError: Invalid parameters, messages or missing credentials.
                Nothing is sent in that case.
            RuntimeError: Called outside a running event loop.
        """
        if not callable(callback):
            raise TypeError("callback must be callable")

        config = self.config_for(overrides)
        payload = self.builder.build(conversation, config)
        if config.stream:
            logger.warning("stream=True requested; the reply is decoded as one complete body")
        request = self._request(payload)

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._exchange(request, OneShotCallback(callback)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        logger.info("Dispatched completion request (model=%s, %d message(s))", payload["model"], len(payload["messages"]))

    def _request(self, payload: dict) -> TransportRequest:
        token = self.credentials.get_token()
        if not token:
            raise ConfigError("No API credential available for the Authorization header")
        return TransportRequest(
            method="POST",
            url=self.url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {token}",
            },
            body=json.dumps(payload).encode("utf-8"),
        )

    async def _exchange(self, request: TransportRequest, delivery: OneShotCallback):
        try:
            outcome = await self._fetch(request)
        except Exception as e:
            logger.exception("Unexpected error while handling the response")
            outcome = DecodeError(f"Could not handle response: {e}")
            outcome.__cause__ = e
        try:
            await delivery.resolve(outcome)
        except Exception:
            logger.exception("Completion callback raised")
            raise

    async def _fetch(self, request: TransportRequest) -> Outcome:
        try:
            response = await self.transport.send(request)
        except TransportError as e:
            return e
        except Exception as e:
            logger.exception("Transport raised an unexpected error")
            error = TransportError(f"Transport failed: {e}")
            error.__cause__ = e
            return error

        if not response.ok:
            logger.warning("Service returned status %s", response.status)
            return TransportError(
                f"Service returned status {response.status}: {_error_detail(response)}",
                status=response.status,
            )

        try:
            result = decode_response(response.body)
        except DecodeError as e:
            logger.warning("Could not decode completion response: %s", e)
            return e
        logger.debug("Decoded %d choice(s), usage=%s", len(result.choices), result.usage)
        return result

    async def join(self):
        """Wait for every in-flight exchange to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self):
        await self.join()
        await self.transport.close()
