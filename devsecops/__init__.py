"""DevSecOps pipeline runner: stage registry, tool provisioning, fail-fast orchestration."""

from devsecops.config import PipelineConfig, load_config
from devsecops.errors import (
    ConfigError,
    InstallFailedError,
    PipelineError,
    ToolExecutionError,
    ToolMissingError,
    UnknownStageError,
)
from devsecops.orchestrator import ActionResult, PipelineResult, run_action, run_pipeline
from devsecops.stages import ALL, ALL_ORDER, STAGE_NAMES, Action, Step, resolve
