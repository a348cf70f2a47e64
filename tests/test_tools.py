"""
Tests for the tool registry and preflight.

Validates:
- Every tool an action needs is registered
- Manual-only tools have a hint and no install command
- Presence check against a fake search path
- Preflight aggregation and formatting
"""

import pytest

from conftest import FakePath
from devsecops.stages import resolve
from devsecops.tools import (
    TOOLS,
    PreflightResult,
    ToolCheckResult,
    check_tool_present,
    format_preflight,
    install_command,
    manual_hint,
    required_tools,
    run_preflight,
)


# ── Registry ──

class TestToolRegistry:
    def test_every_required_tool_registered(self):
        for tool in required_tools(resolve("all")):
            assert tool in TOOLS, f"{tool} missing from TOOLS"

    def test_all_entries_have_both_fields(self):
        for tool, entry in TOOLS.items():
            assert set(entry) == {"install", "manual"}, tool

    @pytest.mark.parametrize("tool", ["sonar-scanner", "zap-baseline.py"])
    def test_manual_only_tools(self, tool):
        assert install_command(tool) is None
        assert "http" in manual_hint(tool)

    def test_install_commands(self):
        assert install_command("talisman") == "pip3 install talisman"
        assert install_command("terraform") == "sudo snap install terraform --classic"
        assert install_command("kubectl") == "sudo snap install kubectl --classic"
        assert install_command("snyk") == "sudo npm install -g snyk"
        assert "trivy" in install_command("trivy")

    def test_unknown_tool(self):
        assert install_command("no-such-tool") is None
        assert manual_hint("no-such-tool") == (
            "Please install no-such-tool manually and re-run the script."
        )


# ── Presence ──

class TestCheckToolPresent:
    def test_present(self):
        present, path = check_tool_present("terraform", FakePath({"terraform"}))
        assert present is True
        assert path == "/usr/bin/terraform"

    def test_missing(self):
        present, path = check_tool_present("terraform", FakePath())
        assert present is False
        assert path is None

    def test_defaults_to_shutil_which(self, monkeypatch):
        monkeypatch.setattr("shutil.which", lambda tool: "/opt/bin/" + tool)
        assert check_tool_present("kubectl") == (True, "/opt/bin/kubectl")


class TestRequiredTools:
    def test_unique_first_use_order(self):
        actions = resolve("docker") + resolve("terraform") + resolve("docker")
        assert required_tools(actions) == ["docker", "trivy", "node", "npm", "snyk", "terraform"]

    def test_placeholders_need_nothing(self):
        assert required_tools(resolve("sast") + resolve("jenkins")) == []

    def test_all(self):
        assert len(required_tools(resolve("all"))) == 13


# ── Preflight ──

class TestRunPreflight:
    def test_all_present(self, full_path):
        result = run_preflight(resolve("all"), which=full_path)
        assert result.all_passed
        assert result.n_present == 13
        assert result.missing == []

    def test_reports_missing(self):
        result = run_preflight(resolve("docker"), which=FakePath({"docker", "node"}))
        assert not result.all_passed
        assert result.missing == ["trivy", "npm", "snyk"]

    def test_marks_installable(self, empty_path):
        result = run_preflight(resolve("sonar") + resolve("deploy"), which=empty_path)
        by_tool = {c.tool: c for c in result.checks}
        assert by_tool["sonar-scanner"].installable is False
        assert by_tool["kubectl"].installable is True

    def test_does_not_install(self, empty_path):
        run_preflight(resolve("all"), which=empty_path)
        assert empty_path.installed == set()


class TestFormatPreflight:
    def test_all_ok(self):
        result = PreflightResult(checks=[
            ToolCheckResult(tool="kubectl", present=True, path="/usr/bin/kubectl"),
        ])
        text = format_preflight(result)
        assert "[     OK] kubectl" in text
        assert "All 1 tools present" in text

    def test_missing_manual(self):
        result = PreflightResult(checks=[
            ToolCheckResult(
                tool="sonar-scanner", present=False,
                hint=manual_hint("sonar-scanner"),
            ),
        ])
        text = format_preflight(result)
        assert "[MISSING] sonar-scanner" in text
        assert "docs.sonarqube.org" in text
        assert "MISSING: 1 tool(s): sonar-scanner" in text

    def test_missing_installable(self):
        result = PreflightResult(checks=[
            ToolCheckResult(tool="terraform", present=False, installable=True),
        ])
        assert "auto-install available" in format_preflight(result)

    def test_no_tools(self):
        assert "No external tools required." in format_preflight(PreflightResult())
