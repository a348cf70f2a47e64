"""Blocking command execution for pipeline steps and tool installs.

Output is not captured: tools write straight to the terminal.
"""

import subprocess
from pathlib import Path
from typing import Callable, Sequence


CommandRunner = Callable[[Sequence[str], Path], int]

# Exit status a shell reports for a command it cannot find
COMMAND_NOT_FOUND = 127


def run_command(argv: Sequence[str], cwd: Path) -> int:
    """Run `argv` in `cwd` and return its exit status."""
    try:
        proc = subprocess.run(list(argv), cwd=cwd, check=False)
    except OSError as e:
        print(f"Could not execute {argv[0]}: {e}")
        return COMMAND_NOT_FOUND
    return int(proc.returncode)


def run_shell(command: str, cwd: Path) -> int:
    """Run an install command string through the shell."""
    try:
        proc = subprocess.run(command, shell=True, cwd=cwd, check=False)
    except OSError as e:
        print(f"Could not run install command in {cwd}: {e}")
        return COMMAND_NOT_FOUND
    return int(proc.returncode)


def dry_run_command(argv: Sequence[str], cwd: Path) -> int:
    print(f"  DRY RUN: Would execute: {' '.join(argv)}  (in {cwd})")
    return 0
