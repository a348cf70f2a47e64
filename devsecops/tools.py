"""
DevSecOps Pipeline: External Tool Registry & Preflight

Every binary the pipeline shells out to, with the best-effort install
command used when it is missing. Tools with `install: None` cannot be
installed automatically; their `manual` hint is shown instead.

The preflight checks presence only. It never installs or runs anything.
"""

import shutil
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional


TRIVY_INSTALL = (
    "wget -qO- https://aquasecurity.github.io/trivy-repo/deb/public.key | sudo apt-key add - && "
    "echo deb https://aquasecurity.github.io/trivy-repo/deb stable main | "
    "sudo tee /etc/apt/sources.list.d/trivy.list && "
    "sudo apt update && sudo apt install trivy -y"
)

TOOLS = {
    "talisman": {
        "install": "pip3 install talisman",
        "manual": None,
    },
    "dependency-check": {
        "install": (
            "sudo snap install dependency-check || "
            "echo 'Please install dependency-check manually from "
            "https://github.com/jeremylong/DependencyCheck'"
        ),
        "manual": "https://github.com/jeremylong/DependencyCheck",
    },
    "python3": {
        "install": "sudo apt install python3 -y",
        "manual": None,
    },
    "terraform": {
        "install": "sudo snap install terraform --classic",
        "manual": None,
    },
    "ansible-playbook": {
        "install": "sudo apt install ansible -y",
        "manual": None,
    },
    "sonar-scanner": {
        "install": None,
        "manual": "https://docs.sonarqube.org/latest/analysis/scan/sonarscanner/",
    },
    "docker": {
        "install": (
            "sudo apt install docker.io -y && "
            "sudo systemctl start docker && sudo systemctl enable docker"
        ),
        "manual": None,
    },
    "trivy": {
        "install": TRIVY_INSTALL,
        "manual": None,
    },
    "node": {
        "install": "sudo apt install nodejs -y",
        "manual": None,
    },
    "npm": {
        "install": "sudo apt install npm -y",
        "manual": None,
    },
    "snyk": {
        "install": "sudo npm install -g snyk",
        "manual": None,
    },
    "zap-baseline.py": {
        "install": None,
        "manual": "https://www.zaproxy.org/download/ (zap-baseline.py must be on your PATH)",
    },
    "kubectl": {
        "install": "sudo snap install kubectl --classic",
        "manual": None,
    },
}


Which = Callable[[str], Optional[str]]


def install_command(tool: str) -> Optional[str]:
    return TOOLS.get(tool, {}).get("install")


def manual_hint(tool: str) -> str:
    """Message telling the operator how to install `tool` by hand."""
    url = TOOLS.get(tool, {}).get("manual")
    if url:
        return f"Please install {tool} manually from {url}"
    return f"Please install {tool} manually and re-run the script."


def check_tool_present(tool: str, which: Optional[Which] = None) -> tuple[bool, Optional[str]]:
    """Check whether `tool` resolves on the search path.

    Returns (present, resolved_path).
    """
    which = which or shutil.which
    path = which(tool)
    return bool(path), path


def required_tools(actions: Iterable) -> list[str]:
    """Unique tools needed by `actions`, in first-use order."""
    seen = []
    for action in actions:
        for tool in action.tools:
            if tool not in seen:
                seen.append(tool)
    return seen


@dataclass
class ToolCheckResult:
    tool: str
    present: bool
    path: Optional[str] = None
    installable: bool = False
    hint: str = ""


@dataclass
class PreflightResult:
    checks: list[ToolCheckResult] = field(default_factory=list)
    total_time_s: float = 0.0

    @property
    def all_passed(self) -> bool:
        return all(c.present for c in self.checks)

    @property
    def n_present(self) -> int:
        return sum(1 for c in self.checks if c.present)

    @property
    def missing(self) -> list[str]:
        return [c.tool for c in self.checks if not c.present]


def run_preflight(actions: Iterable, which: Optional[Which] = None) -> PreflightResult:
    """Check every tool the given actions need."""
    t_start = time.monotonic()
    checks = []
    for tool in required_tools(actions):
        present, path = check_tool_present(tool, which)
        checks.append(ToolCheckResult(
            tool=tool,
            present=present,
            path=path,
            installable=install_command(tool) is not None,
            hint="" if present else manual_hint(tool),
        ))
    return PreflightResult(
        checks=checks,
        total_time_s=round(time.monotonic() - t_start, 2),
    )


def format_preflight(result: PreflightResult) -> str:
    """Format preflight results for terminal display."""
    lines = []
    lines.append("PRE-FLIGHT: Tool Check")
    lines.append("-" * 40)

    for c in result.checks:
        if c.present:
            status = "OK"
            detail = c.path or ""
        else:
            status = "MISSING"
            detail = "auto-install available" if c.installable else c.hint

        lines.append(f"  [{status:>7s}] {c.tool:<18s} {detail}")

    lines.append("-" * 40)

    if not result.checks:
        lines.append("No external tools required.")
    elif result.all_passed:
        lines.append(f"All {result.n_present} tools present. ({result.total_time_s}s)")
    else:
        lines.append(f"MISSING: {len(result.missing)} tool(s): {', '.join(result.missing)}")

    return "\n".join(lines)
