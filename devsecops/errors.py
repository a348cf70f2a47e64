"""Exception taxonomy for pipeline runs.

Every error ends the run. The CLI prints ``str(error)`` and exits 1.
"""


class PipelineError(Exception):
    """Base class for anything that aborts a pipeline run."""


class ConfigError(PipelineError):
    """Configuration file or environment value could not be used."""


class UnknownStageError(PipelineError):
    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"Invalid stage option provided: {stage}")


class ToolMissingError(PipelineError):
    def __init__(self, tool: str, hint: str = ""):
        self.tool = tool
        self.hint = hint
        message = f"{tool} not found."
        if hint:
            message += f" {hint}"
        super().__init__(message)


class InstallFailedError(ToolMissingError):
    def __init__(self, tool: str):
        super().__init__(
            tool,
            hint=f"Failed to install {tool}. Please install it manually and re-run the script.",
        )


class ToolExecutionError(PipelineError):
    def __init__(self, tool: str, returncode: int, argv: tuple[str, ...] = ()):
        self.tool = tool
        self.returncode = returncode
        self.argv = tuple(argv)
        super().__init__(f"{tool} exited with status {returncode}")
