"""Turn a conversation and generation parameters into a request payload."""

import logging
import math
from collections.abc import Mapping
from numbers import Integral, Real
from typing import Any, Iterable, Optional, Union

from .errors import ConfigError
from .types import ChatMessage, GenerationConfig

logger = logging.getLogger(__name__)

MAX_STOP_SEQUENCES = 4

# Optional wire keys in the order they are emitted after model/messages
OPTIONAL_FIELDS = (
    "temperature",
    "top_p",
    "n",
    "stream",
    "stop",
    "max_tokens",
    "presence_penalty",
    "frequency_penalty",
    "logit_bias",
    "user",
)

_DEFAULTS = GenerationConfig()

MessageLike = Union[ChatMessage, Mapping[str, Any]]


def _check_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be finite, got {value!r}")
    # Fractions and other Real types are not JSON serializable
    if isinstance(value, Integral):
        return int(value)
    return float(value)


def _check_positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    return value


def _check_stop(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f"stop must be a string or a list of strings, got {value!r}")
    if len(value) > MAX_STOP_SEQUENCES:
        raise ConfigError(f"stop accepts at most {MAX_STOP_SEQUENCES} sequences, got {len(value)}")
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"stop sequences must be strings, got {item!r}")
    return list(value)


def _check_logit_bias(value: Any) -> dict[str, float]:
    if not isinstance(value, Mapping):
        raise ConfigError(f"logit_bias must be a mapping, got {value!r}")
    bias = {}
    for token, weight in value.items():
        # Token ids are non-negative integers; the wire format keys them as strings
        if isinstance(token, int) and not isinstance(token, bool) and token >= 0:
            key = str(token)
        elif isinstance(token, str) and token.isascii() and token.isdigit():
            key = str(int(token))
        else:
            raise ConfigError(f"logit_bias keys must be token ids, got {token!r}")
        if key in bias:
            raise ConfigError(f"logit_bias has duplicate token id {key}")
        bias[key] = _check_number(f"logit_bias[{token}]", weight)
    return bias


def _check_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be a boolean, got {value!r}")
    return value


def _check_str(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{name} must be a string, got {value!r}")
    return value


class RequestBuilder:
    """Builds chat completion payloads.

    Only ``model`` and ``messages`` are always sent. Other parameters are sent
    when they differ from their defaults, or always when ``include_defaults``
    is set. Parameters whose default is "absent" (no max_tokens, no stop
    sequences, no logit bias, no user) are never sent while unset.
    """

    def __init__(self, include_defaults: bool = False):
        self.include_defaults = include_defaults

    def build(
        self,
        conversation: Iterable[MessageLike],
        config: Optional[GenerationConfig] = None,
    ) -> dict:
        cfg = config or _DEFAULTS

        model = cfg.model
        if not isinstance(model, str) or not model:
            raise ConfigError(f"model must be a non-empty string, got {model!r}")

        messages = [self._message(item).to_dict() for item in conversation]
        if not messages:
            logger.warning("Building a request with an empty conversation")

        values = self._validated(cfg)
        payload = {"model": model, "messages": messages}
        for name in OPTIONAL_FIELDS:
            value = values[name]
            if value is None:
                continue
            if self._is_unset(name, value) and not (self.include_defaults and self._has_concrete_default(name)):
                continue
            payload[name] = value

        logger.debug(
            "Built request for %s with %d message(s), params: %s",
            model,
            len(messages),
            [k for k in payload if k not in ("model", "messages")],
        )
        return payload

    @staticmethod
    def _message(item: MessageLike) -> ChatMessage:
        if isinstance(item, ChatMessage):
            return item
        if isinstance(item, Mapping):
            return ChatMessage.from_dict(item)
        raise ConfigError(f"Conversation entries must be messages, got {type(item).__name__}")

    @staticmethod
    def _validated(cfg: GenerationConfig) -> dict[str, Any]:
        """Validate every optional field and return wire-ready values."""
        return {
            "temperature": _check_number("temperature", cfg.temperature),
            "top_p": _check_number("top_p", cfg.top_p),
            "n": _check_positive_int("n", cfg.n),
            "stream": _check_bool("stream", cfg.stream),
            "stop": _check_stop(cfg.stop),
            "max_tokens": None if cfg.max_tokens is None else _check_positive_int("max_tokens", cfg.max_tokens),
            "presence_penalty": _check_number("presence_penalty", cfg.presence_penalty),
            "frequency_penalty": _check_number("frequency_penalty", cfg.frequency_penalty),
            "logit_bias": _check_logit_bias(cfg.logit_bias),
            "user": None if cfg.user is None else _check_str("user", cfg.user),
        }

    @staticmethod
    def _is_unset(name: str, value: Any) -> bool:
        default = getattr(_DEFAULTS, name)
        if name == "stop":
            return list(default) == value
        if name == "logit_bias":
            return dict(default) == value
        return value == default

    @staticmethod
    def _has_concrete_default(name: str) -> bool:
        default = getattr(_DEFAULTS, name)
        return default is not None and not (isinstance(default, (tuple, Mapping)) and not default)
