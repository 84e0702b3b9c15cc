"""Resilient fetch-decode-validate pipeline for a remote scoring API."""

from .connections import Endpoint, EnvTokenProvider, RequestExecutor, RetryPolicy, StaticTokenProvider
from .errors import (
    ConfigError,
    ContextError,
    HttpError,
    ParseError,
    PipelineError,
    SchemaError,
    ScoreSyncError,
    TransientHttpError,
)
from .pipeline import EngineContext, ScorePipeline, StaticContext, build_pipeline, run_sync
from .validation import DEFAULT_SCORE_SCHEMA, SchemaDescriptor, validate_payload

__all__ = [
    "Endpoint",
    "EnvTokenProvider",
    "RequestExecutor",
    "RetryPolicy",
    "StaticTokenProvider",
    "ConfigError",
    "ContextError",
    "HttpError",
    "ParseError",
    "PipelineError",
    "SchemaError",
    "ScoreSyncError",
    "TransientHttpError",
    "EngineContext",
    "ScorePipeline",
    "StaticContext",
    "build_pipeline",
    "run_sync",
    "DEFAULT_SCORE_SCHEMA",
    "SchemaDescriptor",
    "validate_payload",
]
