# step_workflows/command.py
from __future__ import annotations

from pathlib import Path

from ..cache import StepCache
from ..errors import StepFailure
from ..model import RunCommand, Target
from ..process import ProcessError, format_argv, run_process
from ..settings import RunContext


def applies_to(step: RunCommand, platform: str) -> bool:
    if not step.platforms:
        return True
    return any(platform.startswith(p) for p in step.platforms)


def run_step(target: Target, step: RunCommand, base: Path, cache: StepCache, ctx: RunContext) -> bool:
    """
    Run the command in `base` unless the cache says it already succeeded.
    Returns True if the command was executed now.
    """
    cmd = format_argv(step.argv)

    if not applies_to(step, ctx.platform):
        ctx.console.print_debug(f"[{target.name}] {cmd}: not for {ctx.platform}", level=1)
        ctx.checks.ok(True, f"Command '{cmd}' not needed on {ctx.platform}")
        return False

    if cache.is_command_done(step.argv):
        ctx.console.print_step(step.name, cached=True)
        ctx.checks.ok(True, f"Command '{cmd}' executed")
        return False

    ctx.console.print_step(step.name, cached=False)

    env = dict(ctx.env)
    env.update(target.env)

    try:
        run_process(step.argv, cwd=base, env=env)
    except ProcessError as e:
        ctx.checks.fail(f"Command '{cmd}' executed")
        raise StepFailure(target=target.name, step=step.name, cmd=e.cmd, reason=e.reason()) from e

    cache.mark_command_done(step.argv)
    ctx.checks.ok(True, f"Command '{cmd}' executed")
    return True
