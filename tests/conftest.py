from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Optional

import pytest

from chat_completion_client.llm import (
    BaseTransport,
    CompletionClient,
    StaticCredentials,
    TransportRequest,
    TransportResponse,
)


def completion_body(content: str = "Hello there.", **extra: Any) -> bytes:
    data: Dict[str, Any] = {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "model": "gpt-3.5-turbo-0613",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 9, "completion_tokens": 12, "total_tokens": 21},
    }
    data.update(extra)
    return json.dumps(data).encode()


class DummyTransport(BaseTransport):
    """Records requests and answers with a canned response or error."""

    def __init__(
        self,
        response: Optional[TransportResponse] = None,
        error: Optional[BaseException] = None,
        delay: float = 0,
    ) -> None:
        self.response = response or TransportResponse(status=200, body=completion_body())
        self.error = error
        self.delay = delay
        self.requests: List[TransportRequest] = []
        self.closed = False

    async def send(self, request: TransportRequest) -> TransportResponse:
        self.requests.append(request)
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self) -> None:
        self.closed = True

    def payloads(self) -> List[Dict[str, Any]]:
        return [json.loads(r.body) for r in self.requests]


@pytest.fixture()
def transport() -> DummyTransport:
    return DummyTransport()


@pytest.fixture()
def client(transport: DummyTransport) -> CompletionClient:
    return CompletionClient(transport, StaticCredentials("sk-test"))
