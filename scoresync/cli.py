import argparse
import json
import sys

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError

from .connections import configure_logging, load_sync_config
from .errors import ScoreSyncError
from .pipeline import EngineContext, StaticContext, build_pipeline, run_sync
from .staging import AuditLog, LoggerErrorLog


def _load_config_or_exit(path: str) -> dict:
    try:
        return dict(load_sync_config(path))
    except ScoreSyncError as e:
        print(f"Error loading sync config: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_fetch(args):
    """Handle fetch subcommand."""
    if args.log_level:
        configure_logging(args.log_level, force=True)
    sync_config = _load_config_or_exit(args.config)
    if args.token_env:
        sync_config["token_env"] = args.token_env

    audit_db_url = args.audit_db or sync_config.get("audit_db_url")

    try:
        engine = create_engine(audit_db_url) if audit_db_url else None
        sync_log = AuditLog(engine, args.pipeline) if engine is not None else LoggerErrorLog()
        with build_pipeline(sync_config, context=EngineContext(engine), sync_log=sync_log) as pipeline:
            result = run_sync(pipeline, sync_log, pipeline_name=args.pipeline)
    except (ScoreSyncError, SQLAlchemyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, default=str))

    if result["status"] == "success":
        print("Sync finished successfully.", file=sys.stderr)
        sys.exit(0)
    else:
        print(f"Sync failed: {result.get('error')}", file=sys.stderr)
        sys.exit(1)


def cmd_check_config(args):
    """Handle check-config subcommand."""
    sync_config = _load_config_or_exit(args.config)

    try:
        pipeline = build_pipeline(sync_config, context=StaticContext(True), sync_log=LoggerErrorLog())
    except ScoreSyncError as e:
        print(json.dumps({"valid": False, "error": str(e)}))
        sys.exit(1)

    result = {
        "valid": True,
        "url": pipeline.endpoint.url,
        "timeout_seconds": pipeline.endpoint.timeout_seconds,
        "max_attempts": pipeline.retry_policy.max_attempts,
        "delays": pipeline.retry_policy.delays(),
        "schema": dict(pipeline.schema),
    }
    print(json.dumps(result))
    sys.exit(0)


def main():
    parser = argparse.ArgumentParser(description="Scoring API sync CLI")
    subparsers = parser.add_subparsers(dest="command", help="Subcommand to run")

    fetch_parser = subparsers.add_parser("fetch", help="Fetch and validate the scoring dataset")
    fetch_parser.add_argument("--config", required=True, help="Path to sync JSON/YAML config")
    fetch_parser.add_argument("--token-env", help="Environment variable holding the bearer token")
    fetch_parser.add_argument("--audit-db", help="Sync log database URL (binds the sync to its host)")
    fetch_parser.add_argument("--pipeline", default="score_sync", help="Pipeline name for the sync log")
    fetch_parser.add_argument("--log-level", help="Log level for the scoresync logger (default: SCORESYNC_LOG_LEVEL or INFO)")

    check_parser = subparsers.add_parser("check-config", help="Validate a sync config without fetching")
    check_parser.add_argument("--config", required=True, help="Path to sync JSON/YAML config")

    args = parser.parse_args()

    if args.command == "fetch":
        cmd_fetch(args)
    elif args.command == "check-config":
        cmd_check_config(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
