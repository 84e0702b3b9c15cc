"""Authenticated GET with bounded retries and exponential backoff.

Every attempt produces one of three outcome values:

- ``Success``: a 2xx response, returned to the caller.
- ``TerminalFailure``: a non-2xx response that is not worth retrying (404, 401...).
  It is returned as-is so the decoder can classify it.
- ``RetryableFailure``: a transport exception, a failure while fetching the token,
  or a retryable status (429, 5xx). The executor sleeps and tries again until
  the policy runs out of attempts.
"""

import time
from dataclasses import dataclass
from typing import Callable

import requests

from ...errors import ConfigError, TransientHttpError
from .._logging import get_logger
from ..data_contract import HttpResponse
from .auth import AuthTokenProvider
from .config import Endpoint, RetryPolicy, is_valid_url


@dataclass(frozen=True)
class Success:
    response: HttpResponse


@dataclass(frozen=True)
class TerminalFailure:
    response: HttpResponse


@dataclass(frozen=True)
class RetryableFailure:
    reason: Exception
    response: HttpResponse | None = None


AttemptOutcome = Success | TerminalFailure | RetryableFailure


def build_request_headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }


class RequestExecutor:
    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._session = session
        self._owns_session = session is None
        self._sleep = sleep
        self.logger = get_logger("http.executor")

    def execute(
        self,
        endpoint: Endpoint,
        retry_policy: RetryPolicy,
        auth_provider: AuthTokenProvider,
    ) -> HttpResponse:
        if not is_valid_url(endpoint.url):
            raise ConfigError(f"Endpoint url is not a valid http(s) URL: {endpoint.url!r}")

        session = self._resolve_session()
        current_delay = retry_policy.initial_delay_seconds

        for attempt in range(1, retry_policy.max_attempts + 1):
            self.logger.info("GET %s (attempt %s/%s)", endpoint.url, attempt, retry_policy.max_attempts)
            outcome = self.attempt(session, endpoint, retry_policy, auth_provider)

            if isinstance(outcome, (Success, TerminalFailure)):
                self.logger.info("GET %s returned status=%s", endpoint.url, outcome.response.status_code)
                return outcome.response

            if attempt == retry_policy.max_attempts:
                self.logger.error(
                    "GET %s failed after %s attempts: %s",
                    endpoint.url,
                    attempt,
                    outcome.reason,
                )
                raise outcome.reason

            self.logger.warning(
                "GET %s attempt %s failed (%s), retrying in %.2fs",
                endpoint.url,
                attempt,
                outcome.reason,
                current_delay,
            )
            self._sleep(current_delay)
            current_delay *= retry_policy.backoff_multiplier

    def attempt(
        self,
        session: requests.Session,
        endpoint: Endpoint,
        retry_policy: RetryPolicy,
        auth_provider: AuthTokenProvider,
    ) -> AttemptOutcome:
        try:
            headers = build_request_headers(auth_provider.get_token())
            raw = session.get(endpoint.url, headers=headers, timeout=endpoint.timeout_seconds)
        except Exception as exc:
            return RetryableFailure(reason=exc)

        response = HttpResponse(status_code=raw.status_code, body=raw.text or "")

        if retry_policy.is_retryable_status(response.status_code):
            return RetryableFailure(
                reason=TransientHttpError(response.status_code, response.body),
                response=response,
            )

        if response.is_success:
            return Success(response=response)
        return TerminalFailure(response=response)

    def close(self) -> None:
        if self._owns_session and self._session is not None:
            self.logger.info("Closing scoring API session")
            self._session.close()
            self._session = None

    def __enter__(self) -> "RequestExecutor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _resolve_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"Content-Type": "application/json"})
        return self._session
