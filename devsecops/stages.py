"""
DevSecOps Pipeline: Stage Registry

Maps stage names to the actions that back them. `all` expands to every
action in ALL_ORDER; any other name maps to exactly one action.

The command lines are fixed. PipelineConfig only supplies the literal values
inside them (image tag, target URL, file names), and its defaults are the
values the pipeline has always used.
"""

from dataclasses import dataclass, field
from typing import Optional

from devsecops.config import PipelineConfig
from devsecops.errors import UnknownStageError


ALL = "all"

# Fixed execution order for `all`: secrets and dependencies first, then
# tests and infrastructure, then build, scan, and deploy.
ALL_ORDER = (
    "talisman",
    "dependency",
    "python",
    "terraform",
    "ansible",
    "sonar",
    "docker",
    "sast",
    "dast",
    "jenkins",
    "monitoring",
    "deploy",
)

STAGE_DESCRIPTIONS = {
    ALL: "Execute all pipeline stages (default)",
    "talisman": "Run Talisman secret scan",
    "dependency": "Run dependency-check scan",
    "python": "Run Python unit tests",
    "terraform": "Validate and plan Terraform IaC",
    "ansible": "Execute Ansible playbook for OS configs",
    "sonar": "Run SonarQube analysis",
    "docker": "Build Docker image and scan it",
    "sast": "Run Static Application Security Testing (SAST)",
    "dast": "Run Dynamic Application Security Testing (DAST)",
    "jenkins": "Trigger a Jenkins job",
    "monitoring": "Setup monitoring (Prometheus & Grafana)",
    "deploy": "Deploy application to Kubernetes",
}

STAGE_NAMES = tuple(STAGE_DESCRIPTIONS)


@dataclass(frozen=True)
class Step:
    """One command line.

    `log` lines are printed before the tool check; `note` is echoed as-is.
    An empty argv is a placeholder step that only prints its note.
    """
    argv: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()
    note: str = ""
    log: tuple[str, ...] = ()

    @property
    def tool(self) -> str:
        return self.argv[0] if self.argv else ""


@dataclass(frozen=True)
class Action:
    name: str
    description: str
    start_message: str
    done_message: str
    steps: tuple[Step, ...] = field(default_factory=tuple)

    @property
    def tools(self) -> tuple[str, ...]:
        """Tools required by this action, in first-use order."""
        seen = []
        for step in self.steps:
            for tool in step.requires:
                if tool not in seen:
                    seen.append(tool)
        return tuple(seen)

    @property
    def commands(self) -> list[tuple[str, ...]]:
        return [s.argv for s in self.steps if s.argv]


def _talisman(config: PipelineConfig) -> Action:
    return Action(
        name="talisman",
        description=STAGE_DESCRIPTIONS["talisman"],
        start_message="Running Talisman scan to detect potential secrets in code...",
        done_message="Talisman scan completed.",
        steps=(
            Step(argv=("talisman", "--scan", "."), requires=("talisman",)),
        ),
    )


def _dependency(config: PipelineConfig) -> Action:
    report = config.dependency_report
    return Action(
        name="dependency",
        description=STAGE_DESCRIPTIONS["dependency"],
        start_message="Running Dependency Check for vulnerable dependencies...",
        done_message=f"Dependency check completed. Report generated at {report}.",
        steps=(
            Step(
                argv=("dependency-check", "--project", config.project_name,
                      "--out", report, "--scan", "."),
                requires=("dependency-check",),
            ),
        ),
    )


def _python(config: PipelineConfig) -> Action:
    return Action(
        name="python",
        description=STAGE_DESCRIPTIONS["python"],
        start_message="Running Python unit tests...",
        done_message="Python tests completed.",
        steps=(
            Step(
                argv=("python3", "-m", "unittest", "discover", "-s", config.tests_dir),
                requires=("python3",),
            ),
        ),
    )


def _terraform(config: PipelineConfig) -> Action:
    return Action(
        name="terraform",
        description=STAGE_DESCRIPTIONS["terraform"],
        start_message="Running Terraform configuration validation...",
        done_message="Terraform configuration validated and plan created.",
        steps=(
            Step(argv=("terraform", "init", "-input=false"), requires=("terraform",)),
            Step(argv=("terraform", "validate")),
            Step(argv=("terraform", "plan", f"-out={config.plan_file}")),
        ),
    )


def _ansible(config: PipelineConfig) -> Action:
    return Action(
        name="ansible",
        description=STAGE_DESCRIPTIONS["ansible"],
        start_message="Executing Ansible playbook for OS configurations...",
        done_message="Ansible playbook executed successfully.",
        steps=(
            Step(
                argv=("ansible-playbook", "-i", config.inventory, config.playbook),
                requires=("ansible-playbook",),
            ),
        ),
    )


def _sonar(config: PipelineConfig) -> Action:
    return Action(
        name="sonar",
        description=STAGE_DESCRIPTIONS["sonar"],
        start_message="Starting SonarQube analysis...",
        done_message="SonarQube analysis completed.",
        steps=(
            Step(argv=("sonar-scanner",), requires=("sonar-scanner",)),
        ),
    )


def _docker(config: PipelineConfig) -> Action:
    tag = config.image_tag
    return Action(
        name="docker",
        description=STAGE_DESCRIPTIONS["docker"],
        start_message="Starting Docker image build...",
        done_message="Docker image scanning completed.",
        steps=(
            Step(
                argv=("docker", "build", "-t", tag, "."),
                requires=("docker",),
            ),
            Step(
                argv=("trivy", "image", tag),
                requires=("trivy",),
                log=(
                    f"Docker image built with tag: {tag}.",
                    "Scanning Docker image with Trivy...",
                ),
            ),
            # Snyk is installed through npm, which needs node
            Step(
                argv=("snyk", "container", "test", tag),
                requires=("node", "npm", "snyk"),
                log=("Scanning Docker image with Snyk...",),
            ),
        ),
    )


def _sast(config: PipelineConfig) -> Action:
    return Action(
        name="sast",
        description=STAGE_DESCRIPTIONS["sast"],
        start_message="Starting SAST scan...",
        done_message="SAST scan completed.",
        steps=(
            Step(note="Running SAST scan... (please replace with your SAST tool command)"),
        ),
    )


def _dast(config: PipelineConfig) -> Action:
    return Action(
        name="dast",
        description=STAGE_DESCRIPTIONS["dast"],
        start_message="Starting DAST scan...",
        done_message="DAST scan completed using OWASP ZAP.",
        steps=(
            Step(
                argv=("zap-baseline.py", "-t", config.target_url),
                requires=("zap-baseline.py",),
            ),
        ),
    )


def _jenkins(config: PipelineConfig) -> Action:
    return Action(
        name="jenkins",
        description=STAGE_DESCRIPTIONS["jenkins"],
        start_message="Triggering Jenkins build job...",
        done_message="Jenkins job triggered.",
        steps=(
            Step(note=(
                "Triggering Jenkins job via Jenkins CLI or REST API... "
                "(please configure your Jenkins integration)"
            )),
        ),
    )


def _monitoring(config: PipelineConfig) -> Action:
    return Action(
        name="monitoring",
        description=STAGE_DESCRIPTIONS["monitoring"],
        start_message="Setting up monitoring with Prometheus and Grafana...",
        done_message="Monitoring tools configuration completed.",
        steps=(
            Step(note="Configuring Prometheus and Grafana dashboards... (please configure as needed)"),
        ),
    )


def _deploy(config: PipelineConfig) -> Action:
    return Action(
        name="deploy",
        description=STAGE_DESCRIPTIONS["deploy"],
        start_message="Deploying application to Kubernetes...",
        done_message="Application deployed to Kubernetes.",
        steps=(
            Step(argv=("kubectl", "apply", "-f", config.manifest), requires=("kubectl",)),
        ),
    )


ACTION_BUILDERS = {
    "talisman": _talisman,
    "dependency": _dependency,
    "python": _python,
    "terraform": _terraform,
    "ansible": _ansible,
    "sonar": _sonar,
    "docker": _docker,
    "sast": _sast,
    "dast": _dast,
    "jenkins": _jenkins,
    "monitoring": _monitoring,
    "deploy": _deploy,
}


def build_action(name: str, config: Optional[PipelineConfig] = None) -> Action:
    if name not in ACTION_BUILDERS:
        raise UnknownStageError(name)
    return ACTION_BUILDERS[name](config or PipelineConfig())


def resolve(stage_name: str, config: Optional[PipelineConfig] = None) -> list[Action]:
    """Expand a stage name to its ordered list of actions.

    Raises:
        UnknownStageError: `stage_name` is not `all` or a named stage.
    """
    config = config or PipelineConfig()
    if stage_name == ALL:
        return [build_action(name, config) for name in ALL_ORDER]
    if stage_name not in ACTION_BUILDERS:
        raise UnknownStageError(stage_name)
    return [build_action(stage_name, config)]
