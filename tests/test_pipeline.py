import json
import os
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import create_engine, text

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scoresync.connections.http.auth import EnvTokenProvider, StaticTokenProvider  # noqa: E402
from scoresync.connections.http.config import Endpoint, RetryPolicy  # noqa: E402
from scoresync.connections.http.executor import RequestExecutor  # noqa: E402
from scoresync.errors import (  # noqa: E402
    ConfigError,
    ContextError,
    HttpError,
    ParseError,
    PipelineError,
    SchemaError,
)
from scoresync.pipeline import (  # noqa: E402
    EngineContext,
    ScorePipeline,
    StaticContext,
    build_pipeline,
    run_sync,
)
from scoresync.pipeline import orchestrator  # noqa: E402
from scoresync.staging import AuditLog, LoggerErrorLog  # noqa: E402
from scoresync.validation import DEFAULT_SCORE_SCHEMA, SchemaDescriptor  # noqa: E402

URL = "https://scores.example.com/api/v1/scores"
VALID_BODY = json.dumps({"id": 1, "name": "ada", "score": 91.0, "timestamp": "2026-10-18T09:00:00Z"})


class RecordingLog:
    def __init__(self):
        self.errors = []
        self.successes = []

    def log_error(self, detail):
        self.errors.append(detail)

    def log_success(self, detail):
        self.successes.append(detail)


def make_pipeline(*responses, context=None, schema=DEFAULT_SCORE_SCHEMA, sleeps=None):
    session = MagicMock()
    session.get.side_effect = [SimpleNamespace(status_code=code, text=body) for code, body in responses]
    sync_log = RecordingLog()
    executor = RequestExecutor(session, sleep=(sleeps if sleeps is not None else []).append)
    pipeline = ScorePipeline(
        Endpoint(url=URL),
        RetryPolicy(),
        schema,
        StaticTokenProvider("tkn"),
        context=context or StaticContext(True),
        sync_log=sync_log,
        executor=executor,
    )
    return pipeline, session, sync_log


def test_fetch_data_recovers_from_transient_failures():
    sleeps = []
    pipeline, session, sync_log = make_pipeline((503, "down"), (503, "down"), (200, VALID_BODY), sleeps=sleeps)

    payload = pipeline.fetch_data()

    assert payload["name"] == "ada"
    assert session.get.call_count == 3
    assert sleeps == [1.0, 2.0]
    assert sync_log.errors == []
    assert sync_log.successes == []


def test_fetch_data_does_not_retry_not_found():
    pipeline, session, sync_log = make_pipeline((404, "no such dataset"))

    with pytest.raises(PipelineError) as excinfo:
        pipeline.fetch_data()

    error = excinfo.value
    assert session.get.call_count == 1
    assert isinstance(error.cause, HttpError)
    assert error.cause.status_code == 404
    assert error.__cause__ is error.cause
    assert error.step == "decoding"
    assert str(error).startswith("fetchData: ")
    assert "no such dataset" in str(error)
    assert len(sync_log.errors) == 1


def test_invalid_json_fails_before_validation():
    pipeline, _, sync_log = make_pipeline((200, "{not json"))

    with patch.object(orchestrator, "validate_payload") as validate:
        with pytest.raises(PipelineError) as excinfo:
            pipeline.fetch_data()

    validate.assert_not_called()
    assert isinstance(excinfo.value.cause, ParseError)
    assert sync_log.errors[0]["step"] == "decoding"


def test_schema_violation_is_logged_once_and_wrapped():
    body = json.dumps({"id": 1, "name": "ada", "timestamp": "t"})
    pipeline, _, sync_log = make_pipeline((200, body))

    with pytest.raises(PipelineError) as excinfo:
        pipeline.fetch_data()

    cause = excinfo.value.cause
    assert isinstance(cause, SchemaError)
    assert cause.field == "score"
    assert len(sync_log.errors) == 1
    detail = sync_log.errors[0]
    assert detail["step"] == "validating"
    assert detail["action"] == "fetchData"
    assert "score" in detail["message"]
    assert "SchemaError" in detail["stack"]


def test_unbound_context_fails_without_network_calls():
    pipeline, session, sync_log = make_pipeline((200, VALID_BODY), context=StaticContext(False))

    with pytest.raises(PipelineError) as excinfo:
        pipeline.fetch_data()

    assert isinstance(excinfo.value.cause, ContextError)
    assert excinfo.value.step == "idle"
    session.get.assert_not_called()
    assert len(sync_log.errors) == 1


def test_engine_context_is_bound_only_with_engine():
    assert EngineContext(create_engine("sqlite:///:memory:")).is_bound()
    assert not EngineContext(None).is_bound()


def test_run_sync_logs_success_once():
    pipeline, _, sync_log = make_pipeline((200, VALID_BODY))

    result = run_sync(pipeline, sync_log, pipeline_name="nightly")

    assert set(result) == {"run_id", "status", "fields", "duration_seconds", "payload"}
    assert result["status"] == "success"
    assert result["fields"] == 4
    assert result["payload"]["id"] == 1
    assert len(sync_log.successes) == 1
    success = sync_log.successes[0]
    assert set(success) == {"action", "pipeline_name", "run_id", "fields", "duration_seconds"}
    assert success["action"] == "fetchData"
    assert success["pipeline_name"] == "nightly"
    assert success["run_id"] == result["run_id"]
    assert success["fields"] == 4
    assert sync_log.errors == []


def test_failing_sync_log_still_raises_pipeline_error():
    pipeline, session, _ = make_pipeline((404, "gone"))
    broken_log = MagicMock()
    broken_log.log_error.side_effect = RuntimeError("audit db down")
    pipeline.sync_log = broken_log

    with pytest.raises(PipelineError) as excinfo:
        pipeline.fetch_data()

    assert isinstance(excinfo.value.cause, HttpError)
    assert excinfo.value.cause.status_code == 404
    broken_log.log_error.assert_called_once()
    assert session.get.call_count == 1

    second_pipeline, _, _ = make_pipeline((401, "denied"))
    second_pipeline.sync_log = broken_log
    result = run_sync(second_pipeline, broken_log)
    assert result["status"] == "failure"
    assert "401" in result["error"]


def test_run_sync_reports_failure_without_success_log():
    pipeline, _, sync_log = make_pipeline((401, "bad token"))

    result = run_sync(pipeline, sync_log)

    assert result["status"] == "failure"
    assert result["step"] == "decoding"
    assert "401" in result["error"]
    assert sync_log.successes == []
    assert len(sync_log.errors) == 1


def test_build_pipeline_from_config_and_environment():
    config = {
        "url": URL,
        "timeout_seconds": 5,
        "schema": {"id": "number"},
        "token": "static-token",
    }
    with patch.dict(os.environ, {"SCORESYNC_MAX_ATTEMPTS": "4"}, clear=False):
        pipeline = build_pipeline(config, context=StaticContext(True), sync_log=RecordingLog())

    assert pipeline.endpoint.url == URL
    assert pipeline.endpoint.timeout_seconds == 5
    assert pipeline.retry_policy.max_attempts == 4
    assert dict(pipeline.schema) == {"id": "number"}
    assert pipeline.auth_provider.get_token() == "static-token"


def test_build_pipeline_rereads_rotated_env_token():
    with patch.dict(os.environ, {"SCORESYNC_TOKEN": "first"}, clear=False):
        pipeline = build_pipeline({"url": URL}, context=StaticContext(True), sync_log=RecordingLog())
        assert pipeline.auth_provider.get_token() == "first"

        os.environ["SCORESYNC_TOKEN"] = "second"
        assert isinstance(pipeline.auth_provider, EnvTokenProvider)
        assert pipeline.auth_provider.get_token() == "second"


def test_rotated_env_token_is_sent_on_the_next_attempt():
    session = MagicMock()
    session.get.side_effect = [
        SimpleNamespace(status_code=503, text="busy"),
        SimpleNamespace(status_code=200, text=VALID_BODY),
    ]

    def rotate(_delay):
        os.environ["SCORESYNC_TOKEN"] = "rotated"

    with patch.dict(os.environ, {"SCORESYNC_TOKEN": "original"}, clear=False):
        pipeline = build_pipeline(
            {"url": URL},
            context=StaticContext(True),
            sync_log=RecordingLog(),
            executor=RequestExecutor(session, sleep=rotate),
        )
        pipeline.fetch_data()

    first, second = session.get.call_args_list
    assert first.kwargs["headers"]["Authorization"] == "Bearer original"
    assert second.kwargs["headers"]["Authorization"] == "Bearer rotated"


def test_build_pipeline_defaults_to_env_token_and_score_schema():
    with patch.dict(os.environ, {}, clear=True):
        pipeline = build_pipeline({"url": URL}, context=StaticContext(True), sync_log=RecordingLog())

    assert isinstance(pipeline.auth_provider, EnvTokenProvider)
    assert pipeline.auth_provider.variable == "SCORESYNC_TOKEN"
    assert pipeline.schema is DEFAULT_SCORE_SCHEMA
    assert pipeline.retry_policy.delays() == [1.0, 2.0]


def test_build_pipeline_rejects_bad_configuration():
    with patch.dict(os.environ, {}, clear=True):
        with pytest.raises(ConfigError):
            build_pipeline({}, context=StaticContext(True), sync_log=RecordingLog())
        with pytest.raises(ConfigError):
            build_pipeline({"url": "ftp://x"}, context=StaticContext(True), sync_log=RecordingLog())
        with pytest.raises(ConfigError):
            build_pipeline(
                {"url": URL, "schema": "{broken"}, context=StaticContext(True), sync_log=RecordingLog()
            )


def test_audit_log_writes_error_and_success_rows():
    engine = create_engine("sqlite:///:memory:")
    audit = AuditLog(engine, pipeline_name="nightly")
    pipeline, _, _ = make_pipeline((200, "[]"))
    pipeline.sync_log = audit

    with pytest.raises(PipelineError):
        pipeline.fetch_data()
    audit.log_success({"action": "sync", "run_id": "r1"})

    with engine.connect() as conn:
        rows = conn.execute(
            text("SELECT pipeline_name, level, step, message, detail FROM etl_sync_log ORDER BY id")
        ).fetchall()

    assert [row[1] for row in rows] == ["error", "success"]
    assert rows[0][0] == "nightly"
    assert rows[0][2] == "validating"
    assert "<root>" in rows[0][3]
    assert rows[1][2] == "sync"
    assert json.loads(rows[1][4])["run_id"] == "r1"


def test_logger_error_log_writes_to_standard_logging(caplog):
    sync_log = LoggerErrorLog()

    with caplog.at_level("INFO", logger="scoresync.sync_log"):
        sync_log.log_error({"step": "fetching", "message": "boom"})
        sync_log.log_success({"action": "sync"})

    messages = [record.getMessage() for record in caplog.records]
    assert "step=fetching message=boom" in messages
    assert any("Sync succeeded" in message for message in messages)


def test_custom_schema_descriptor_flows_through_pipeline():
    pipeline, _, _ = make_pipeline((200, json.dumps({"tags": ["a"], "meta": {}})), schema=SchemaDescriptor({"tags": "array", "meta": "object"}))

    assert pipeline.fetch_data() == {"tags": ["a"], "meta": {}}
