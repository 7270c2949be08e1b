"""
Tests for the command-line surface.
"""

import sys

import pytest
from click.testing import CliRunner

from nodescaffold import cli as cli_module
from nodescaffold.cli import cli
from nodescaffold.dsl import cmd, install, mkdir, target
from nodescaffold.settings import child_environment, verbosity_from_env

PY = sys.executable


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def demo_steps(monkeypatch):
    """Replace the Node.js toolchain with a small, local target."""
    steps = [mkdir("out"), install("out", "a.txt")]
    monkeypatch.setattr(cli_module, "check_environment", lambda ctx: ctx.checks.ok(True, "environment"))
    monkeypatch.setattr(cli_module, "default_targets", lambda platform: [target("demo", *steps)])
    return steps


def invoke(runner, project, templates, *args, env=None):
    return runner.invoke(
        cli,
        ["--project-dir", str(project), "--template-dir", str(templates), *args],
        env=env or {},
    )


def test_help(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "--init" in result.output
    assert "--verbose" in result.output


def test_unknown_flag(runner):
    result = runner.invoke(cli, ["--frobnicate"])
    assert result.exit_code != 0
    assert "Usage" in result.output


def test_run_and_rerun(runner, project, templates, demo_steps):
    first = invoke(runner, project, templates)
    assert first.exit_code == 0, first.output
    assert (project / "demo" / "out" / "a.txt").is_file()
    assert "failed: 0" in first.output

    second = invoke(runner, project, templates)
    assert second.exit_code == 0, second.output
    assert "checks: 4" in first.output
    assert "checks: 4" in second.output


def test_failure_exits_nonzero(runner, project, templates, monkeypatch):
    monkeypatch.setattr(cli_module, "check_environment", lambda ctx: None)
    monkeypatch.setattr(
        cli_module,
        "default_targets",
        lambda platform: [target("demo", cmd(PY, "-c", "import sys; sys.exit(4)"))],
    )
    result = invoke(runner, project, templates)

    assert result.exit_code == 1
    assert "Child exited with value 4" in result.output
    assert "failed: 1" in result.output


def test_init_removes_targets(runner, project, templates, demo_steps):
    (project / "backend").mkdir()
    (project / "backend" / "package.json").write_text("{}")
    (project / ".backend.steps.json").write_text("{}")

    result = invoke(runner, project, templates, "--init")

    assert result.exit_code == 0, result.output
    assert not (project / "backend").exists()
    assert not (project / ".backend.steps.json").exists()
    assert "Removed backend/" in result.output


def test_corrupt_cache_reports_and_summarises(runner, project, templates, demo_steps):
    (project / "demo").mkdir()
    (project / ".demo.steps.json").write_text("{bad", encoding="utf-8")

    result = invoke(runner, project, templates)

    assert result.exit_code == 1
    assert "RESULTS" in result.output
    assert "ERROR: Corrupt cache" in result.output
    assert "target: demo" in result.output
    assert "--init" in result.output


def test_unicode_digit_verbose_is_ignored(runner, project, templates, demo_steps):
    result = invoke(runner, project, templates, env={"VERBOSE": "\u00b2"})
    assert result.exit_code == 0, result.output
    assert "[DEBUG]" not in result.output


def test_verbose_flags_add_to_env(runner, project, templates, demo_steps):
    result = invoke(runner, project, templates, "-vv", env={"VERBOSE": "1"})
    assert result.exit_code == 0, result.output
    assert "[DEBUG] cache for demo" in result.output


class TestSettings:
    def test_verbosity_from_env(self):
        assert verbosity_from_env({}) == 0
        assert verbosity_from_env({"VERBOSE": "2"}) == 2
        assert verbosity_from_env({"VERBOSE": "-1"}) == 0
        assert verbosity_from_env({"VERBOSE": "loud"}) == 0
        assert verbosity_from_env({"VERBOSE": "\u00b2"}) == 0
        assert verbosity_from_env({"VERBOSE": " 3 "}) == 3

    def test_child_environment_drops_proxies(self):
        env = child_environment({"PATH": "/bin", "HTTP_PROXY": "x", "https_proxy": "y"})
        assert env == {"PATH": "/bin"}
