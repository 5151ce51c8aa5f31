"""Bearer token providers."""

import os
from typing import Optional

from .base import CredentialProvider


class StaticCredentials(CredentialProvider):
    """Always returns the token it was given."""

    def __init__(self, token: str):
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token


class EnvCredentials(CredentialProvider):
    """Reads the token from an environment variable on every call."""

    def __init__(self, var: str = "OPENAI_API_KEY"):
        self.var = var

    def get_token(self) -> Optional[str]:
        return os.getenv(self.var) or None
