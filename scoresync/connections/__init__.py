"""Public entrypoints for the scoring API connection layer."""

from ._config import load_connection_config, load_sync_config
from ._logging import configure_logging
from .data_contract import HttpResponse
from .http import (
    Endpoint,
    EnvTokenProvider,
    RequestExecutor,
    RetryPolicy,
    StaticTokenProvider,
    decode_response,
)

__all__ = [
    "load_connection_config",
    "load_sync_config",
    "configure_logging",
    "HttpResponse",
    "Endpoint",
    "EnvTokenProvider",
    "RequestExecutor",
    "RetryPolicy",
    "StaticTokenProvider",
    "decode_response",
]
