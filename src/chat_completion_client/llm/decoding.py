"""Decode chat completion response bodies."""

import json
from typing import Any, Union

from .errors import ConfigError, DecodeError
from .types import ChatMessage, Choice, CompletionResult, Usage


def _text(body: Union[bytes, str]) -> str:
    if not isinstance(body, bytes):
        return body
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(
            f"Response is not valid UTF-8: {e}",
            body.decode("utf-8", errors="replace"),
        ) from e


def _choice(position: int, raw: Any, body: str) -> Choice:
    if not isinstance(raw, dict):
        raise DecodeError(f"choices[{position}] is not an object", body)
    message = raw.get("message")
    if not isinstance(message, dict):
        raise DecodeError(f"choices[{position}] has no message", body)
    content = message.get("content")
    if content is None:
        # Null when the model only returned tool calls
        content = ""
    try:
        decoded = ChatMessage(
            role=message.get("role", "assistant"),
            content=content,
            name=message.get("name"),
        )
    except ConfigError as e:
        raise DecodeError(f"choices[{position}].message is invalid: {e}", body) from e

    index = raw.get("index", position)
    if isinstance(index, bool) or not isinstance(index, int):
        raise DecodeError(f"choices[{position}].index is not an integer", body)
    return Choice(index=index, message=decoded, finish_reason=raw.get("finish_reason"))


def _usage(raw: Any, body: str) -> Usage:
    if raw is None:
        return Usage()
    if not isinstance(raw, dict):
        raise DecodeError("usage is not an object", body)
    counts = {}
    for key in ("prompt_tokens", "completion_tokens", "total_tokens"):
        value = raw.get(key, 0)
        if isinstance(value, bool) or not isinstance(value, int):
            raise DecodeError(f"usage.{key} is not an integer: {value!r}", body)
        counts[key] = value
    return Usage(**counts)


def decode_response(body: Union[bytes, str]) -> CompletionResult:
    """Parse a chat completion response body.

    Raises:
        DecodeError: The body is not JSON or lacks choices/messages.
    """
    text = _text(body)
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise DecodeError(f"Response is not valid JSON: {e}", text) from e

    if not isinstance(data, dict):
        raise DecodeError("Response is not a JSON object", text)

    raw_choices = data.get("choices")
    if not isinstance(raw_choices, list) or not raw_choices:
        raise DecodeError("Response has no choices", text)

    choices = sorted(
        (_choice(i, raw, text) for i, raw in enumerate(raw_choices)),
        key=lambda c: c.index,
    )
    return CompletionResult(
        choices=tuple(choices),
        usage=_usage(data.get("usage"), text),
        id=data.get("id"),
        model=data.get("model"),
    )
