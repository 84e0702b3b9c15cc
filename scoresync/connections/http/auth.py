"""Bearer token providers. Tokens are fetched on every attempt and never cached here."""

import os
from typing import Callable, Protocol

from ...errors import ConfigError


class AuthTokenProvider(Protocol):
    def get_token(self) -> str:
        """Return the bearer token to send with the next request."""
        ...


class StaticTokenProvider:
    def __init__(self, token: str):
        if not token:
            raise ConfigError("token cannot be empty")
        self._token = token

    def get_token(self) -> str:
        return self._token


class EnvTokenProvider:
    """Reads the token from an environment variable each time it is asked."""

    def __init__(self, variable: str = "SCORESYNC_TOKEN"):
        self.variable = variable

    def get_token(self) -> str:
        token = os.getenv(self.variable, "").strip()
        if not token:
            raise ConfigError(f"Environment variable {self.variable} is not set")
        return token


class CallableTokenProvider:
    def __init__(self, fetch: Callable[[], str]):
        self._fetch = fetch

    def get_token(self) -> str:
        return self._fetch()
