from __future__ import annotations

import httpx
import pytest

from chat_completion_client.llm import HttpxTransport, TransportError, TransportRequest


def make_request() -> TransportRequest:
    return TransportRequest(
        method="POST",
        url="https://api.example.test/v1/chat/completions",
        headers={"Content-Type": "application/json", "Authorization": "Bearer sk-test"},
        body=b'{"model": "gpt-3.5-turbo", "messages": []}',
    )


@pytest.mark.asyncio
async def test_sends_method_headers_and_body() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = request.content
        return httpx.Response(200, content=b'{"choices": []}')

    transport = HttpxTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    try:
        response = await transport.send(make_request())
    finally:
        await transport.close()

    assert response.status == 200
    assert response.ok
    assert response.body == b'{"choices": []}'
    assert captured == {
        "method": "POST",
        "auth": "Bearer sk-test",
        "body": b'{"model": "gpt-3.5-turbo", "messages": []}',
    }


@pytest.mark.asyncio
async def test_error_status_is_returned_not_raised() -> None:
    transport = HttpxTransport(
        client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(503, content=b"busy")))
    )

    response = await transport.send(make_request())
    await transport.close()

    assert response.status == 503
    assert not response.ok


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc_type",
    [httpx.ReadTimeout, httpx.ConnectError],
)
async def test_httpx_errors_become_transport_errors(exc_type: type) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_type("boom", request=request)

    transport = HttpxTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    with pytest.raises(TransportError) as excinfo:
        await transport.send(make_request())
    await transport.close()

    assert excinfo.value.status is None
    assert isinstance(excinfo.value.__cause__, exc_type)


@pytest.mark.asyncio
async def test_close_is_idempotent() -> None:
    transport = HttpxTransport(timeout=5)
    await transport.close()

    await transport._get_client()
    await transport.close()
    await transport.close()

    assert transport._client is None
