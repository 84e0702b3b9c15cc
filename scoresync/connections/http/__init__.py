from .auth import AuthTokenProvider, CallableTokenProvider, EnvTokenProvider, StaticTokenProvider
from .config import Endpoint, RetryPolicy, is_valid_url
from .decoder import decode_response
from .executor import (
    AttemptOutcome,
    RequestExecutor,
    RetryableFailure,
    Success,
    TerminalFailure,
    build_request_headers,
)

__all__ = [
    "AuthTokenProvider",
    "CallableTokenProvider",
    "EnvTokenProvider",
    "StaticTokenProvider",
    "Endpoint",
    "RetryPolicy",
    "is_valid_url",
    "decode_response",
    "AttemptOutcome",
    "RequestExecutor",
    "RetryableFailure",
    "Success",
    "TerminalFailure",
    "build_request_headers",
]
