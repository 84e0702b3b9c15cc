import json
from datetime import datetime, timezone as UTC
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Engine

from ..connections._logging import get_logger

logger = get_logger("staging.audit")


def ensure_sync_log_table(engine: Engine) -> None:
    """Ensure the etl_sync_log table exists in the destination store."""
    is_sqlite = engine.dialect.name == "sqlite"
    id_type = "INTEGER PRIMARY KEY AUTOINCREMENT" if is_sqlite else "BIGSERIAL PRIMARY KEY"
    ts_type = "TIMESTAMP" if is_sqlite else "TIMESTAMP WITH TIME ZONE"

    ddl = f"""
    CREATE TABLE IF NOT EXISTS etl_sync_log (
        id            {id_type},
        pipeline_name TEXT NOT NULL,
        level         TEXT NOT NULL,   -- 'error' | 'success'
        step          TEXT,
        message       TEXT,
        detail        TEXT,
        logged_at     {ts_type} NOT NULL
    )
    """
    with engine.connect() as connection:
        logger.info("Ensuring sync log table exists")
        connection.execute(text(ddl))
        connection.commit()


def write_sync_log_record(
    engine: Engine,
    pipeline_name: str,
    level: str,
    detail: dict[str, Any],
    logged_at: datetime | None = None,
) -> None:
    """Append one row to the sync log."""
    sql = """
    INSERT INTO etl_sync_log (pipeline_name, level, step, message, detail, logged_at)
    VALUES (:pipeline_name, :level, :step, :message, :detail, :logged_at)
    """
    params = {
        "pipeline_name": pipeline_name,
        "level": level,
        "step": detail.get("step") or detail.get("action"),
        "message": detail.get("message"),
        "detail": json.dumps(detail, default=str),
        "logged_at": logged_at or datetime.now(UTC.utc),
    }

    with engine.connect() as connection:
        logger.info("Writing sync log record", extra={"pipeline_name": pipeline_name, "level": level})
        connection.execute(text(sql), params)
        connection.commit()


class AuditLog:
    """Sync log collaborator backed by the etl_sync_log table."""

    def __init__(self, engine: Engine, pipeline_name: str = "score_sync"):
        self.engine = engine
        self.pipeline_name = pipeline_name
        ensure_sync_log_table(engine)

    def log_error(self, detail: dict[str, Any]) -> None:
        write_sync_log_record(self.engine, self.pipeline_name, "error", detail)

    def log_success(self, detail: dict[str, Any]) -> None:
        write_sync_log_record(self.engine, self.pipeline_name, "success", detail)


class LoggerErrorLog:
    """Sync log collaborator that writes to a standard logger instead of a table."""

    def __init__(self, name: str = "sync_log"):
        self.logger = get_logger(name)

    def log_error(self, detail: dict[str, Any]) -> None:
        self.logger.error(
            "step=%s message=%s",
            detail.get("step") or detail.get("action"),
            detail.get("message"),
        )
        if detail.get("stack"):
            self.logger.debug("%s", detail["stack"])

    def log_success(self, detail: dict[str, Any]) -> None:
        self.logger.info("Sync succeeded: %s", detail)
