"""Assemble a ScorePipeline from layered configuration."""

import json
from pathlib import Path
from typing import Any

from ..connections._config import load_connection_config
from ..connections.http.auth import AuthTokenProvider, EnvTokenProvider, StaticTokenProvider
from ..connections.http.config import Endpoint, RetryPolicy
from ..connections.http.executor import RequestExecutor
from ..errors import ConfigError
from ..validation.schema import DEFAULT_SCORE_SCHEMA, SchemaDescriptor
from .context import HostContext
from .orchestrator import ScorePipeline, SyncLog

ENV_PREFIX = "SCORESYNC"
# Read per attempt by EnvTokenProvider, never frozen into the merged config.
ENV_ONLY_KEYS = ("token",)


def resolve_schema(value: Any) -> SchemaDescriptor:
    if value is None:
        return DEFAULT_SCORE_SCHEMA
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"schema must be a JSON object: {exc}") from exc
    if not isinstance(value, dict):
        raise ConfigError("schema must map field names to type tags")
    return SchemaDescriptor(value)


def resolve_token_provider(config: dict[str, Any]) -> AuthTokenProvider:
    if config.get("token_env"):
        return EnvTokenProvider(config["token_env"])
    if config.get("token"):
        return StaticTokenProvider(config["token"])
    return EnvTokenProvider(f"{ENV_PREFIX}_TOKEN")


def build_pipeline(
    config: dict[str, Any] | None = None,
    *,
    file_path: str | Path | None = None,
    context: HostContext,
    sync_log: SyncLog,
    auth_provider: AuthTokenProvider | None = None,
    executor: RequestExecutor | None = None,
    env_prefix: str | None = ENV_PREFIX,
) -> ScorePipeline:
    merged = load_connection_config(
        config,
        file_path=file_path,
        env_prefix=env_prefix,
        required=("url",),
        env_exclude=ENV_ONLY_KEYS,
    )

    return ScorePipeline(
        endpoint=Endpoint.from_config(merged),
        retry_policy=RetryPolicy.from_config(merged),
        schema=resolve_schema(merged.get("schema")),
        auth_provider=auth_provider or resolve_token_provider(merged),
        context=context,
        sync_log=sync_log,
        executor=executor,
    )
