from __future__ import annotations

import json

import pytest

from chat_completion_client.llm import DecodeError, Role, Usage, decode_response

from conftest import completion_body


def test_decodes_single_choice() -> None:
    result = decode_response(completion_body("bonjour"))

    assert result.content == "bonjour"
    assert result.choices[0].message.role is Role.ASSISTANT
    assert result.choices[0].finish_reason == "stop"
    assert result.usage == Usage(prompt_tokens=9, completion_tokens=12, total_tokens=21)
    assert result.id == "chatcmpl-123"
    assert result.model == "gpt-3.5-turbo-0613"


def test_choices_ordered_by_index() -> None:
    body = json.dumps(
        {
            "choices": [
                {"index": 1, "message": {"role": "assistant", "content": "second"}, "finish_reason": "length"},
                {"index": 0, "message": {"role": "assistant", "content": "first"}, "finish_reason": "stop"},
            ],
        }
    )

    result = decode_response(body)

    assert [m.content for m in result.messages] == ["first", "second"]
    assert [c.finish_reason for c in result.choices] == ["stop", "length"]
    assert result.usage == Usage()


def test_null_content_decodes_as_empty_string() -> None:
    body = json.dumps({"choices": [{"message": {"role": "assistant", "content": None}}]})
    assert decode_response(body).content == ""


@pytest.mark.parametrize(
    "body",
    [
        b"<html>Bad Gateway</html>",
        b"",
        b"[1, 2, 3]",
        b'{"usage": {}}',
        b'{"choices": []}',
        b'{"choices": "nope"}',
        b'{"choices": [{"index": 0}]}',
        b'{"choices": [{"message": {"role": "wizard", "content": "hi"}}]}',
        b'{"choices": [{"message": {"role": "assistant", "content": 12}}]}',
        b'{"choices": [{"message": {"role": "assistant", "content": "hi"}}], "usage": {"total_tokens": "many"}}',
    ],
)
def test_malformed_bodies_raise_decode_error(body: bytes) -> None:
    with pytest.raises(DecodeError):
        decode_response(body)


def test_decode_error_keeps_body_excerpt() -> None:
    with pytest.raises(DecodeError) as excinfo:
        decode_response("not json" * 200)

    assert excinfo.value.body is not None
    assert len(excinfo.value.body) == 500


def test_invalid_utf8_raises_decode_error() -> None:
    body = b'{"choices": [{"message": {"role": "assistant", "content": "\xff\xfe caf\xe9"}}]}'

    with pytest.raises(DecodeError, match="UTF-8"):
        decode_response(body)


@pytest.mark.parametrize(
    "usage",
    [
        '{"prompt_tokens": Infinity}',
        '{"prompt_tokens": NaN}',
        '{"completion_tokens": 3.7}',
        '{"total_tokens": "21"}',
        '{"total_tokens": true}',
    ],
)
def test_usage_counts_must_be_integers(usage: str) -> None:
    body = '{"choices": [{"message": {"role": "assistant", "content": "hi"}}], "usage": %s}' % usage

    with pytest.raises(DecodeError, match="usage"):
        decode_response(body)


def test_deeply_nested_json_raises_decode_error() -> None:
    with pytest.raises(DecodeError):
        decode_response(b"[" * 100000 + b"]" * 100000)
