"""
DevSecOps Pipeline: Tool Provisioning

A missing tool is either installed on the fly (ShellProvisioner) or
reported as missing (NullProvisioner). ensure_tool() does the
check, install, re-check sequence around whichever provisioner it gets.

Tests pass a fake provisioner so no package manager is ever touched.
"""

import time
from pathlib import Path
from typing import Callable, Optional, Protocol

from devsecops.errors import InstallFailedError, ToolMissingError
from devsecops.runner import run_shell
from devsecops.tools import Which, check_tool_present, install_command, manual_hint


class ToolProvisioner(Protocol):
    def install(self, tool: str) -> None:
        """Try to make `tool` available. Raise ToolMissingError if there is no way to."""
        ...


class NullProvisioner:
    """Never installs anything."""

    def install(self, tool: str) -> None:
        raise ToolMissingError(tool, hint=manual_hint(tool))


class ShellProvisioner:
    """Install tools with the shell commands from the tool registry.

    The install command's own exit status is ignored; ensure_tool() decides
    success by checking the search path again after `settle_s` seconds.
    """

    def __init__(
        self,
        cwd: Path = Path("."),
        settle_s: float = 2.0,
        shell: Optional[Callable[[str, Path], int]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.cwd = cwd
        self.settle_s = settle_s
        self.shell = shell or run_shell
        self.sleep = sleep or time.sleep

    def install(self, tool: str) -> None:
        command = install_command(tool)
        if command is None:
            raise ToolMissingError(tool, hint=manual_hint(tool))
        print(f"Attempting to install {tool}...")
        self.shell(command, self.cwd)
        # Give snap/apt a moment before the re-check
        if self.settle_s > 0:
            self.sleep(self.settle_s)


def ensure_tool(
    tool: str,
    provisioner: ToolProvisioner,
    which: Optional[Which] = None,
) -> str:
    """Make sure `tool` is on the search path, installing it if allowed.

    Returns:
        The resolved path of the tool.

    Raises:
        ToolMissingError: absent and the provisioner has no way to install it.
        InstallFailedError: an install was attempted and the tool is still absent.
    """
    print(f"Checking if {tool} is installed...")
    present, path = check_tool_present(tool, which)
    if present:
        print(f"{tool} is already installed.")
        return path

    print(f"{tool} not found.")
    provisioner.install(tool)

    present, path = check_tool_present(tool, which)
    if not present:
        raise InstallFailedError(tool)

    print(f"{tool} installed successfully.")
    return path
