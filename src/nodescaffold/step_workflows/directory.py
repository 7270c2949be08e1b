# step_workflows/directory.py
from __future__ import annotations

from pathlib import Path

from ..cache import StepCache
from ..errors import VerificationFailed
from ..model import EnsureDirectory, Target
from ..settings import RunContext


def run_step(target: Target, step: EnsureDirectory, base: Path, cache: StepCache, ctx: RunContext) -> bool:
    path = base / step.path
    created = False

    if not (cache.is_directory_done(step.path) and path.is_dir()):
        ctx.console.print_step(step.name, cached=False)
        if not path.is_dir():
            try:
                path.mkdir(parents=True)
            except OSError as e:
                ctx.checks.fail(f"Directory '{step.path}' exists")
                raise VerificationFailed(target=target.name, step=step.name, message=str(e)) from e
            created = True
        cache.mark_directory_done(step.path)
    else:
        ctx.console.print_step(step.name, cached=True)

    ctx.checks.ok(path.is_dir(), f"Directory '{step.path}' exists")
    return created
