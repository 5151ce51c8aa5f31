"""Application configuration."""

import os
from dataclasses import dataclass

import dotenv

dotenv.load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AppSettings:
    """Client settings with environment variable overrides."""

    # Service
    api_url: str = "https://api.openai.com/v1/chat/completions"
    model_name: str = "gpt-3.5-turbo"
    request_timeout: float = 60.0

    # Request shaping
    include_defaults: bool = False

    # Name of the variable holding the bearer token, not the token itself
    api_key_env: str = "OPENAI_API_KEY"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppSettings":
        return cls(
            api_url=os.getenv("CHAT_API_URL", cls.api_url),
            model_name=os.getenv("CHAT_MODEL", cls.model_name),
            request_timeout=float(os.getenv("CHAT_REQUEST_TIMEOUT", cls.request_timeout)),
            include_defaults=_env_bool("CHAT_INCLUDE_DEFAULTS", cls.include_defaults),
            api_key_env=os.getenv("CHAT_API_KEY_ENV", cls.api_key_env),
            log_level=os.getenv("CHAT_LOG_LEVEL", cls.log_level),
        )


settings = AppSettings.from_env()
