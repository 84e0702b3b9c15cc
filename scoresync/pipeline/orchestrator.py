"""Fetch -> decode -> validate, with a single point of failure logging."""

import traceback
from enum import Enum
from typing import Any, Protocol

from ..connections._logging import get_logger
from ..connections.http.auth import AuthTokenProvider
from ..connections.http.config import Endpoint, RetryPolicy
from ..connections.http.decoder import decode_response
from ..connections.http.executor import RequestExecutor
from ..errors import ContextError, PipelineError
from ..validation.schema import SchemaDescriptor, validate_payload
from .context import HostContext

logger = get_logger("pipeline.orchestrator")


class PipelineStage(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    DECODING = "decoding"
    VALIDATING = "validating"
    DONE = "done"
    FAILED = "failed"


class SyncLog(Protocol):
    def log_error(self, detail: dict[str, Any]) -> None: ...

    def log_success(self, detail: dict[str, Any]) -> None: ...


class ScorePipeline:
    def __init__(
        self,
        endpoint: Endpoint,
        retry_policy: RetryPolicy,
        schema: SchemaDescriptor,
        auth_provider: AuthTokenProvider,
        *,
        context: HostContext,
        sync_log: SyncLog,
        executor: RequestExecutor | None = None,
        operation_name: str = "fetchData",
    ):
        self.endpoint = endpoint
        self.retry_policy = retry_policy
        self.schema = schema
        self.auth_provider = auth_provider
        self.context = context
        self.sync_log = sync_log
        self.executor = executor or RequestExecutor()
        self.operation_name = operation_name

    def fetch_data(self) -> Any:
        """Return the validated payload or raise PipelineError wrapping the first failure.

        Each call logs exactly one error record on failure and nothing on success.
        """
        stage = PipelineStage.IDLE
        try:
            if not self.context.is_bound():
                raise ContextError("No bound destination host; refusing to fetch")

            stage = PipelineStage.FETCHING
            response = self.executor.execute(self.endpoint, self.retry_policy, self.auth_provider)

            stage = PipelineStage.DECODING
            payload = decode_response(response)

            stage = PipelineStage.VALIDATING
            validate_payload(payload, self.schema)
        except Exception as exc:
            logger.error("%s %s during %s: %s", self.operation_name, PipelineStage.FAILED.value, stage.value, exc)
            detail = {
                "step": stage.value,
                "action": self.operation_name,
                "message": str(exc),
                "stack": traceback.format_exc(),
            }
            try:
                self.sync_log.log_error(detail)
            except Exception:
                logger.exception("%s could not write its error record to the sync log", self.operation_name)
            raise PipelineError(self.operation_name, stage.value, exc) from exc

        logger.debug("%s reached stage %s", self.operation_name, PipelineStage.DONE.value)
        return payload

    def close(self) -> None:
        self.executor.close()

    def __enter__(self) -> "ScorePipeline":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
