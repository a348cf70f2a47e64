"""Shared fakes: a search path, a command runner, and a provisioner."""

from pathlib import Path

import pytest


class FakePath:
    """Stands in for shutil.which over a mutable set of installed tools."""

    def __init__(self, installed=()):
        self.installed = set(installed)
        self.lookups = []

    def __call__(self, tool):
        self.lookups.append(tool)
        if tool in self.installed:
            return f"/usr/bin/{tool}"
        return None


class FakeRunner:
    """Records every command; exit status per tool comes from `failures`."""

    def __init__(self, failures=None):
        self.failures = dict(failures or {})
        self.calls = []

    def __call__(self, argv, cwd):
        self.calls.append((tuple(argv), Path(cwd)))
        return self.failures.get(argv[0], 0)

    @property
    def tools_run(self):
        return [argv[0] for argv, _ in self.calls]


class FakeProvisioner:
    """Installs by adding the tool to a FakePath, unless told it cannot."""

    def __init__(self, path, broken=()):
        self.path = path
        self.broken = set(broken)
        self.installed = []

    def install(self, tool):
        self.installed.append(tool)
        if tool not in self.broken:
            self.path.installed.add(tool)


ALL_TOOLS = {
    "talisman", "dependency-check", "python3", "terraform", "ansible-playbook",
    "sonar-scanner", "docker", "trivy", "node", "npm", "snyk",
    "zap-baseline.py", "kubectl",
}


@pytest.fixture
def full_path():
    return FakePath(ALL_TOOLS)


@pytest.fixture
def empty_path():
    return FakePath()


@pytest.fixture
def runner():
    return FakeRunner()
