"""Types for the chat completion client."""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from .errors import ConfigError


class Role(str, Enum):
    """Speaker of a conversation turn."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    """A message in a chat conversation."""
    role: Role
    content: str
    name: Optional[str] = None  # e.g. "example_user" for few-shot turns

    def __post_init__(self):
        try:
            role = Role(self.role)
        except ValueError:
            raise ConfigError(f"Unknown message role: {self.role!r}") from None
        object.__setattr__(self, "role", role)
        if not isinstance(self.content, str):
            raise ConfigError(f"Message content must be a string, got {type(self.content).__name__}")
        if self.name is not None and not isinstance(self.name, str):
            raise ConfigError(f"Message name must be a string, got {type(self.name).__name__}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessage":
        try:
            return cls(role=data["role"], content=data["content"], name=data.get("name"))
        except KeyError as e:
            raise ConfigError(f"Message is missing {e.args[0]!r}") from None

    def to_dict(self) -> dict:
        data = {"role": self.role.value, "content": self.content}
        if self.name is not None:
            data["name"] = self.name
        return data


def few_shot(
    system: str,
    examples: Iterable[tuple[str, str]],
    prompt: str,
) -> list[ChatMessage]:
    """Build a few-shot primed conversation.

    The instruction comes first, then each (user, assistant) example pair as
    named system turns, then the real user prompt.
    """
    messages = [ChatMessage(Role.SYSTEM, system)]
    for user_text, assistant_text in examples:
        messages.append(ChatMessage(Role.SYSTEM, user_text, name="example_user"))
        messages.append(ChatMessage(Role.SYSTEM, assistant_text, name="example_assistant"))
    messages.append(ChatMessage(Role.USER, prompt))
    return messages


@dataclass(frozen=True)
class GenerationConfig:
    """Generation parameters for one chat completion request.

    A value object: derive variants with ``merged`` instead of mutating.
    ``None`` and empty defaults mean "let the service decide".
    """
    model: str = "gpt-3.5-turbo"
    max_tokens: Optional[int] = None
    temperature: float = 1.0
    top_p: float = 1.0
    n: int = 1
    stream: bool = False
    stop: tuple[str, ...] = ()
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    logit_bias: Mapping[Any, float] = field(default_factory=lambda: MappingProxyType({}))
    user: Optional[str] = None

    def __post_init__(self):
        # Freeze containers so a shared default cannot be changed through them
        if isinstance(self.stop, list):
            object.__setattr__(self, "stop", tuple(self.stop))
        if isinstance(self.logit_bias, dict):
            object.__setattr__(self, "logit_bias", MappingProxyType(dict(self.logit_bias)))

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in dataclasses.fields(cls))

    def merged(self, overrides: Optional[Mapping[str, Any]] = None) -> "GenerationConfig":
        """Return a copy with ``overrides`` applied field by field."""
        if not overrides:
            return self
        unknown = set(overrides) - set(self.field_names())
        if unknown:
            raise ConfigError(f"Unknown generation parameter(s): {', '.join(sorted(unknown))}")
        return dataclasses.replace(self, **overrides)


@dataclass(frozen=True)
class Usage:
    """Token counts reported by the service."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class Choice:
    """One generated message and the reason generation stopped."""
    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None


@dataclass(frozen=True)
class CompletionResult:
    """Decoded chat completion response."""
    choices: tuple[Choice, ...]
    usage: Usage = field(default_factory=Usage)
    id: Optional[str] = None
    model: Optional[str] = None

    @property
    def content(self) -> str:
        return self.choices[0].message.content

    @property
    def messages(self) -> list[ChatMessage]:
        return [choice.message for choice in self.choices]
