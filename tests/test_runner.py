"""
Tests for command execution. subprocess.run is replaced; nothing is spawned.
"""

import subprocess
from pathlib import Path
from types import SimpleNamespace

from devsecops.runner import COMMAND_NOT_FOUND, dry_run_command, run_command, run_shell


class TestRunCommand:
    def test_passes_argv_and_cwd(self, monkeypatch):
        seen = {}

        def fake_run(cmd, **kwargs):
            seen["cmd"] = cmd
            seen.update(kwargs)
            return SimpleNamespace(returncode=0)

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert run_command(("terraform", "validate"), Path("/work")) == 0
        assert seen["cmd"] == ["terraform", "validate"]
        assert seen["cwd"] == Path("/work")
        assert seen["check"] is False
        assert "shell" not in seen

    def test_returns_exit_status(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", lambda cmd, **kw: SimpleNamespace(returncode=2))
        assert run_command(("kubectl", "apply"), Path(".")) == 2

    def test_vanished_binary(self, monkeypatch, capsys):
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError(2, "No such file or directory")

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert run_command(("trivy", "image", "x"), Path(".")) == COMMAND_NOT_FOUND
        assert "Could not execute trivy" in capsys.readouterr().out


class TestRunShell:
    def test_uses_shell(self, monkeypatch):
        seen = {}

        def fake_run(cmd, **kwargs):
            seen["cmd"] = cmd
            seen.update(kwargs)
            return SimpleNamespace(returncode=0)

        monkeypatch.setattr(subprocess, "run", fake_run)
        run_shell("sudo snap install kubectl --classic", Path("."))
        assert seen["cmd"] == "sudo snap install kubectl --classic"
        assert seen["shell"] is True

    def test_missing_cwd(self, monkeypatch, capsys):
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", str(kwargs["cwd"]))

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert run_shell("sudo apt install npm -y", Path("/gone")) == COMMAND_NOT_FOUND
        assert "Could not run install command in /gone" in capsys.readouterr().out


class TestDryRun:
    def test_prints_and_succeeds(self, capsys):
        assert dry_run_command(("sonar-scanner",), Path(".")) == 0
        assert "DRY RUN: Would execute: sonar-scanner" in capsys.readouterr().out
