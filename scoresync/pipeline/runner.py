import uuid
from datetime import datetime, timezone as UTC
from typing import Any

from ..connections._logging import get_logger
from ..errors import PipelineError
from .orchestrator import ScorePipeline, SyncLog

logger = get_logger("pipeline.runner")


def run_sync(pipeline: ScorePipeline, sync_log: SyncLog, pipeline_name: str = "score_sync") -> dict[str, Any]:
    """
    Run one synchronization pass:
    1. Fetch, decode and validate the scoring payload
    2. Record success in the sync log (failures are logged by the pipeline itself)
    3. Return a summary for the caller
    """
    run_id = str(uuid.uuid4())
    started_at = datetime.now(UTC.utc)

    try:
        payload = pipeline.fetch_data()
    except PipelineError as e:
        logger.warning("Sync run failed", extra={"run_id": run_id})
        return {
            "run_id": run_id,
            "status": "failure",
            "step": e.step,
            "error": str(e),
        }

    finished_at = datetime.now(UTC.utc)
    duration = (finished_at - started_at).total_seconds()

    sync_log.log_success(
        {
            "action": pipeline.operation_name,
            "pipeline_name": pipeline_name,
            "run_id": run_id,
            "fields": len(payload),
            "duration_seconds": duration,
        }
    )

    return {
        "run_id": run_id,
        "status": "success",
        "fields": len(payload),
        "duration_seconds": duration,
        "payload": payload,
    }
