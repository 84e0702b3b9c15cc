import sys
from pathlib import Path

from sqlalchemy import create_engine

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scoresync import EnvTokenProvider, build_pipeline, run_sync
from scoresync.pipeline import EngineContext
from scoresync.staging import AuditLog


def main():
    """
    Example: Pulling the scoring dataset and recording the run in a sync log.

    Demonstrates:
    - Bearer auth re-read from SCORESYNC_TOKEN on every attempt
    - Retry with exponential backoff on 429/5xx
    - Schema enforcement before anything is handed back
    """

    sync_config = {
        "url": "https://scores.example.com/api/v1/scores",
        "timeout_seconds": 15,
        "schema": {"id": "number", "name": "string", "score": "number", "timestamp": "string"},
    }

    engine = create_engine("sqlite:///scoresync.db")
    audit_log = AuditLog(engine, pipeline_name="example_sync")

    pipeline = build_pipeline(
        sync_config,
        context=EngineContext(engine),
        sync_log=audit_log,
        auth_provider=EnvTokenProvider("SCORESYNC_TOKEN"),
    )

    print("Starting scoring API sync...")
    result = run_sync(pipeline, audit_log, pipeline_name="example_sync")

    if result["status"] == "success":
        print(f"Success! Payload: {result['payload']}")
        print(f"Run ID: {result['run_id']}")
    else:
        print(f"Sync failed: {result.get('error')}")


if __name__ == "__main__":
    main()
