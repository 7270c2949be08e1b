# step_workflows/template.py
from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

from ..cache import StepCache
from ..errors import MissingTemplate, VerificationFailed
from ..model import InstallFile, Target
from ..settings import RunContext


def template_path(template_root: Path, target_dir: Path, subdir: str, name: str) -> Path:
    """<template_root>/<target name>/<subdir>/<name>"""
    return Path(template_root) / Path(target_dir).name / subdir / name


def is_stale(destination: Path, template: Path) -> bool:
    """True if `destination` is strictly older than `template`."""
    return destination.stat().st_mtime < template.stat().st_mtime


def install_file(
    cache: StepCache,
    template_root: str | Path,
    target_dir: str | Path,
    subdir: str,
    destination: str,
    template: Optional[str] = None,
) -> bool:
    """
    Copy a template into `target_dir/subdir/destination`.

    The copy happens when the cache has no record of the destination, the
    destination is missing, or the destination is older than the template
    (so template edits reach already-scaffolded targets).

    Returns True if the file was copied now, False if it was already current.

    Raises:
        MissingTemplate: the template source does not exist
    """
    target_dir = Path(target_dir)
    src = template_path(Path(template_root), target_dir, subdir, template or destination)
    rel = Path(subdir) / destination
    dst = target_dir / rel

    if not src.is_file():
        raise MissingTemplate(target=target_dir.name, step=f"File '{rel.as_posix()}'", path=str(src))

    if cache.is_file_done(rel) and dst.is_file() and not is_stale(dst, src):
        return False

    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dst)
    cache.mark_file_done(rel)
    return True


def resolve_destination(step: InstallFile, target_dir: Path) -> list[str]:
    """Destination file names for `step` (one, unless it uses a glob)."""
    if not step.match:
        return [step.destination]
    return sorted(p.name for p in (target_dir / step.subdir).glob(step.match) if p.is_file())


def run_step(target: Target, step: InstallFile, base: Path, cache: StepCache, ctx: RunContext) -> bool:
    names = resolve_destination(step, base)

    if step.match:
        found = len(names) == 1
        label = names[0] if names else step.match
        ctx.checks.ok(found, f"File '{step.subdir}/{label}' found")
        if not found:
            raise VerificationFailed(
                target=target.name,
                step=step.name,
                message=f"expected exactly one file matching '{step.match}' in {step.subdir}/, found {len(names)}",
            )

    destination = names[0]
    dst = Path(step.subdir) / destination
    try:
        copied = install_file(cache, ctx.template_root, base, step.subdir, destination, step.template)
    except MissingTemplate:
        ctx.checks.fail(f"File '{dst.as_posix()}' created")
        raise
    except OSError as e:
        ctx.checks.fail(f"File '{dst.as_posix()}' created")
        raise VerificationFailed(target=target.name, step=step.name, message=str(e)) from e
    ctx.console.print_step(step.name, cached=not copied)

    ctx.checks.ok((base / dst).is_file(), f"File '{dst.as_posix()}' created")
    return copied
