"""
DevSecOps Pipeline: Stage Orchestrator

Runs resolved actions strictly in order, one external process at a time.
The first failure ends the run: later actions are never started.

Collaborators are passed in rather than looked up globally:
    provisioner  installs missing tools (or refuses to)
    runner       executes a command line and returns its exit status
    which        resolves a tool name on the search path
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from devsecops.config import PipelineConfig
from devsecops.console import log_info
from devsecops.errors import PipelineError, ToolExecutionError
from devsecops.provisioner import NullProvisioner, ShellProvisioner, ToolProvisioner, ensure_tool
from devsecops.runner import CommandRunner, dry_run_command, run_command
from devsecops.stages import Action
from devsecops.tools import Which


@dataclass
class ActionResult:
    name: str
    success: bool
    duration_s: float = 0.0
    commands_run: list[list[str]] = field(default_factory=list)
    error: str = ""


@dataclass
class PipelineResult:
    stage: str
    planned: list[str] = field(default_factory=list)
    results: list[ActionResult] = field(default_factory=list)
    failed_action: Optional[str] = None
    error: Optional[PipelineError] = None
    total_time_s: float = 0.0
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def passed(self) -> bool:
        return self.error is None

    @property
    def completed(self) -> list[str]:
        return [r.name for r in self.results if r.success]

    def raise_for_failure(self) -> None:
        if self.error is not None:
            raise self.error


def default_provisioner(config: PipelineConfig) -> ToolProvisioner:
    if config.auto_install and not config.dry_run:
        return ShellProvisioner(cwd=config.workdir, settle_s=config.install_settle_s)
    return NullProvisioner()


def default_runner(config: PipelineConfig) -> CommandRunner:
    return dry_run_command if config.dry_run else run_command


def run_action(
    action: Action,
    config: PipelineConfig,
    *,
    provisioner: Optional[ToolProvisioner] = None,
    runner: Optional[CommandRunner] = None,
    which: Optional[Which] = None,
    result: Optional[ActionResult] = None,
) -> ActionResult:
    """Run every step of one action.

    Commands are appended to `result` as they run, the failing one included.
    A caller-supplied `result` keeps them after an exception escapes.

    Raises:
        ToolMissingError / InstallFailedError: a required tool is unavailable.
        ToolExecutionError: a command exited non-zero.
    """
    provisioner = provisioner or default_provisioner(config)
    runner = runner or default_runner(config)

    t_start = time.monotonic()
    if result is None:
        result = ActionResult(name=action.name, success=False)

    log_info(action.start_message)
    for step in action.steps:
        for line in step.log:
            log_info(line)

        if not config.dry_run:
            for tool in step.requires:
                ensure_tool(tool, provisioner, which)

        if step.note:
            print(step.note)
        if not step.argv:
            continue

        returncode = runner(step.argv, config.workdir)
        result.commands_run.append(list(step.argv))
        if returncode != 0:
            raise ToolExecutionError(step.tool, returncode, step.argv)

    log_info(action.done_message)
    result.success = True
    result.duration_s = round(time.monotonic() - t_start, 2)
    return result


def run_pipeline(
    actions: list[Action],
    config: PipelineConfig,
    *,
    provisioner: Optional[ToolProvisioner] = None,
    runner: Optional[CommandRunner] = None,
    which: Optional[Which] = None,
) -> PipelineResult:
    """Run `actions` in order, stopping at the first failure.

    Errors are not raised; they are recorded on the returned result
    (`error`, `failed_action`). Call `raise_for_failure()` to propagate.
    """
    provisioner = provisioner or default_provisioner(config)
    runner = runner or default_runner(config)

    t_start = time.monotonic()
    pipeline = PipelineResult(
        stage=config.stage,
        planned=[a.name for a in actions],
    )

    for action in actions:
        t_action = time.monotonic()
        result = ActionResult(name=action.name, success=False)
        try:
            run_action(
                action, config,
                provisioner=provisioner, runner=runner, which=which,
                result=result,
            )
        except PipelineError as e:
            result.duration_s = round(time.monotonic() - t_action, 2)
            result.error = str(e)
            pipeline.results.append(result)
            pipeline.failed_action = action.name
            pipeline.error = e
            break
        pipeline.results.append(result)

    pipeline.total_time_s = round(time.monotonic() - t_start, 2)
    return pipeline
