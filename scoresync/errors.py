"""Error taxonomy for the fetch-decode-validate pipeline."""

from typing import Any

MISSING_KEY = "MissingKey"
TYPE_MISMATCH = "TypeMismatch"


class ScoreSyncError(Exception):
    """Base class for every error raised by scoresync."""


class ContextError(ScoreSyncError):
    """Raised when the pipeline runs without a bound host context."""


class ConfigError(ScoreSyncError):
    """Raised for malformed endpoint, retry, schema, or auth configuration."""


class HttpError(ScoreSyncError):
    """Terminal non-2xx response. Never retried."""

    def __init__(self, status_code: int, body: str, message: str | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"HTTP {status_code}: {_preview(body)}")


class TransientHttpError(HttpError):
    """Retryable status (429 or 5xx) still failing after the last attempt."""

    def __init__(self, status_code: int, body: str):
        super().__init__(status_code, body, f"Transient HTTP {status_code} after retries: {_preview(body)}")


class ParseError(ScoreSyncError):
    """A 2xx response whose body is not valid JSON."""

    def __init__(self, raw: str, cause: Exception):
        self.raw = raw
        self.cause = cause
        super().__init__(f"Response body is not valid JSON: {cause}")


class SchemaError(ScoreSyncError):
    """First structural violation found in a decoded payload."""

    def __init__(self, kind: str, field: str, expected_type: str, actual_type: str | None = None):
        self.kind = kind
        self.field = field
        self.expected_type = expected_type
        self.actual_type = actual_type
        if kind == MISSING_KEY:
            message = f"Missing required key '{field}' (expected {expected_type})"
        else:
            message = f"Field '{field}' expected {expected_type}, got {actual_type}"
        super().__init__(message)


class PipelineError(ScoreSyncError):
    """Uniform wrapper raised by the orchestrator for any stage failure."""

    def __init__(self, operation: str, step: str, cause: BaseException):
        self.operation = operation
        self.step = step
        self.cause = cause
        super().__init__(f"{operation}: {cause}")


def _preview(body: Any, limit: int = 200) -> str:
    text = "" if body is None else str(body)
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
