"""
Pytest configuration and fixtures for nodescaffold tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from nodescaffold.checks import Checks
from nodescaffold.settings import RunContext, child_environment
from nodescaffold.ui.console import Console, set_console


@pytest.fixture(autouse=True)
def quiet_console() -> Console:
    console = Console(verbosity=0)
    set_console(console)
    return console


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def templates(tmp_path: Path) -> Path:
    """Template root with a single template for target 'demo': demo/out/a.txt."""
    root = tmp_path / "tpl"
    (root / "demo" / "out").mkdir(parents=True)
    (root / "demo" / "out" / "a.txt").write_bytes(b"hello\r\ntemplate\x00bytes\n")
    return root


@pytest.fixture
def make_ctx(project: Path, templates: Path, quiet_console: Console) -> Callable[..., RunContext]:
    """A fresh RunContext per call, so each run gets its own check tally."""

    def _make(**overrides) -> RunContext:
        kwargs = dict(
            project_root=project,
            template_root=templates,
            env=child_environment(),
            platform="linux",
            checks=Checks(quiet_console),
            console=quiet_console,
        )
        kwargs.update(overrides)
        return RunContext(**kwargs)

    return _make


@pytest.fixture
def ctx(make_ctx) -> RunContext:
    return make_ctx()
