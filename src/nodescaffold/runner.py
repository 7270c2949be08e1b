# runner.py
from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from .cache import StepCache
from .errors import VerificationFailed
from .model import Step, Target
from .settings import RunContext
from .step_workflows import STEP_RUNNERS


@dataclass
class TargetResult:
    """What one setup_target() call did."""
    name: str
    executed: int = 0  # steps that did real work (process, copy, write, mkdir)
    cached: int = 0    # steps satisfied by the cache / real state


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

def run_step(target: Target, step: Step, base: Path, cache: StepCache, ctx: RunContext) -> bool:
    """Dispatch one step to its cache-aware runner. Returns True if work was done."""
    runner = STEP_RUNNERS.get(type(step))
    if runner is None:
        raise TypeError(f"[{target.name}] unsupported step type: {type(step).__name__}")
    return runner(target, step, base, cache, ctx)


def _run_bootstrap(target: Target, target_dir: Path, cache: StepCache, ctx: RunContext, result: TargetResult) -> None:
    # generators that create the target directory themselves run from the project root
    if not target.bootstrap:
        return
    if target_dir.is_dir():
        for step in target.bootstrap:
            ctx.checks.ok(True, f"{step.name} not needed ({target.name} exists)")
            result.cached += 1
        return
    for step in target.bootstrap:
        if run_step(target, step, ctx.project_root, cache, ctx):
            result.executed += 1
        else:
            result.cached += 1


def setup_target(target: Target, ctx: RunContext) -> TargetResult:
    """
    Provision one target:
      load cache -> bootstrap -> ensure dir -> steps in order -> save cache.

    The cache is saved exactly once, whether or not a step failed, so progress
    made before a failure is kept; the failure is then re-raised.
    """
    store = ctx.store
    target_dir = store.target_dir(target.name)
    result = TargetResult(target.name)

    ctx.console.print_target_start(target.name)

    if store.exists(target.name) and not target_dir.is_dir():
        ctx.console.print_cache_discarded(target.name, str(store.record_path(target.name)))
    cache = store.load(target.name)
    ctx.console.print_debug(f"cache for {target.name}: {len(cache)} entries loaded")

    try:
        _run_bootstrap(target, target_dir, cache, ctx, result)

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            ctx.checks.fail(f"Now in {target.name} directory")
            raise VerificationFailed(target=target.name, step=f"Directory '{target.name}'", message=str(e)) from e
        ctx.checks.ok(target_dir.is_dir(), f"Now in {target.name} directory")

        for step in target.steps:
            if run_step(target, step, target_dir, cache, ctx):
                result.executed += 1
            else:
                result.cached += 1
    finally:
        path = store.save(target.name, cache)
        ctx.console.print_cache_saved(target.name, str(path), len(cache))

    return result


def run_targets(targets: Iterable[Target], ctx: RunContext) -> List[TargetResult]:
    """Set up each target in order; the first failure stops the whole run."""
    results: List[TargetResult] = []
    for target in targets:
        results.append(setup_target(target, ctx))
    return results


def reset_targets(ctx: RunContext, names: Iterable[str]) -> List[str]:
    """Remove target directories (and with them their cached progress)."""
    removed: List[str] = []
    for name in names:
        d = ctx.store.target_dir(name)
        if d.is_dir():
            shutil.rmtree(d)
            removed.append(name)
        ctx.store.discard(name)
    return removed
