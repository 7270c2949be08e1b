# step_workflows/patch.py
from __future__ import annotations

from pathlib import Path

from ..cache import StepCache
from ..errors import VerificationFailed
from ..model import PatchFile, Target
from ..settings import RunContext


def patch_lines(text: str, line: str, replacement: str) -> tuple[str, int]:
    """Replace every line equal to `line` (ignoring its line ending). Returns (text, count)."""
    out = []
    count = 0
    for current in text.splitlines(keepends=True):
        body = current.rstrip("\r\n")
        if body == line:
            out.append(replacement + current[len(body):])
            count += 1
        else:
            out.append(current)
    return "".join(out), count


def run_step(target: Target, step: PatchFile, base: Path, cache: StepCache, ctx: RunContext) -> bool:
    path = base / step.path

    if cache.is_file_done(step.path) and path.is_file():
        ctx.console.print_step(step.name, cached=True)
        ctx.checks.ok(True, f"File '{step.path}' patched")
        return False

    ctx.console.print_step(step.name, cached=False)
    if not path.is_file():
        ctx.checks.fail(f"File '{step.path}' patched")
        raise VerificationFailed(target=target.name, step=step.name, message=f"{step.path} does not exist")

    try:
        text, count = patch_lines(path.read_text(encoding="utf-8"), step.line, step.replacement)
        if count:
            path.write_text(text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        ctx.checks.fail(f"File '{step.path}' patched")
        raise VerificationFailed(target=target.name, step=step.name, message=str(e)) from e
    if not count:
        ctx.console.print_debug(f"[{target.name}] {step.path}: no line matched {step.line!r}", level=1)

    cache.mark_file_done(step.path)
    ctx.checks.ok(True, f"File '{step.path}' patched")
    return count > 0
