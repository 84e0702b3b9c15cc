from .context import EngineContext, HostContext, StaticContext
from .factory import build_pipeline, resolve_schema, resolve_token_provider
from .orchestrator import PipelineStage, ScorePipeline, SyncLog
from .runner import run_sync

__all__ = [
	"EngineContext",
	"HostContext",
	"StaticContext",
	"build_pipeline",
	"resolve_schema",
	"resolve_token_provider",
	"PipelineStage",
	"ScorePipeline",
	"SyncLog",
	"run_sync",
]
