import re

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...errors import ConfigError

URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)

RETRYABLE_STATUS_CODES = frozenset({429})
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY_SECONDS = 1.0
DEFAULT_BACKOFF_MULTIPLIER = 2.0
DEFAULT_TIMEOUT_SECONDS = 30.0


def is_valid_url(url: str) -> bool:
    return isinstance(url, str) and URL_PATTERN.match(url.strip()) is not None


class Endpoint(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    url: str
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    @field_validator("url")
    @classmethod
    def _check_url_shape(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_url(value):
            raise ValueError(f"url must start with http:// or https:// (got {value!r})")
        return value

    @classmethod
    def from_config(cls, config: dict) -> "Endpoint":
        try:
            return cls.model_validate(config)
        except ValidationError as exc:
            raise ConfigError(f"Invalid endpoint configuration: {exc}") from exc


class RetryPolicy(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)
    initial_delay_seconds: float = Field(default=DEFAULT_INITIAL_DELAY_SECONDS, ge=0)
    backoff_multiplier: float = Field(default=DEFAULT_BACKOFF_MULTIPLIER, gt=1)
    retryable_status_codes: frozenset[int] = RETRYABLE_STATUS_CODES
    retry_server_errors: bool = True

    def is_retryable_status(self, status_code: int) -> bool:
        if status_code in self.retryable_status_codes:
            return True
        return self.retry_server_errors and 500 <= status_code < 600

    def delays(self) -> list[float]:
        """Backoff sleeps between attempts: initial * multiplier ** (i - 1)."""
        return [
            self.initial_delay_seconds * self.backoff_multiplier ** index
            for index in range(self.max_attempts - 1)
        ]

    @classmethod
    def from_config(cls, config: dict) -> "RetryPolicy":
        try:
            return cls.model_validate(config)
        except ValidationError as exc:
            raise ConfigError(f"Invalid retry policy configuration: {exc}") from exc
