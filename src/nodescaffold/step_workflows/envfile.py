# step_workflows/envfile.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional

from ..cache import StepCache
from ..errors import MissingPrerequisite, VerificationFailed
from ..model import EnvEntry, Target, WriteEnvFile
from ..process import which
from ..settings import RunContext


def _executable_name(name: str, platform: str) -> str:
    return f"{name}.exe" if platform == "win32" else name


def find_executables(root: Path, name: str) -> List[Path]:
    """All regular files called `name` below `root`, in a stable order."""
    found: List[Path] = []
    # unreadable directories are skipped by os.walk
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        if name in filenames:
            p = Path(dirpath) / name
            if p.is_file():
                found.append(p)
    return found


def locate(entry: EnvEntry, base: Path, env: Dict[str, str], platform: str) -> Optional[Path]:
    if entry.use_path:
        hit = which(entry.executable, env)
        if hit:
            return Path(hit)

    root = Path(os.path.expanduser(entry.search_root))
    if not root.is_absolute():
        root = base / root
    matches = find_executables(root, _executable_name(entry.executable, platform))
    # last match wins: several architecture variants may be installed side by side
    return matches[-1] if matches else None


def render_env(values: Dict[str, Path]) -> str:
    return "".join(f"{var}='{os.path.normpath(path)}'\n" for var, path in values.items())


def run_step(target: Target, step: WriteEnvFile, base: Path, cache: StepCache, ctx: RunContext) -> bool:
    path = base / step.path
    written = False

    if cache.is_file_done(step.path) and path.is_file():
        ctx.console.print_step(step.name, cached=True)
    else:
        ctx.console.print_step(step.name, cached=False)
        # an existing .env may have been edited by hand: keep it
        if not path.is_file():
            values: Dict[str, Path] = {}
            for entry in step.entries:
                found = locate(entry, base, ctx.env, ctx.platform)
                if found is None:
                    ctx.checks.fail(f"Executable {entry.executable} found")
                    raise MissingPrerequisite(
                        tool=entry.executable,
                        message=f"Executable {entry.executable} not found (searched {entry.search_root})",
                        hint=f"Install {entry.executable} or fix PATH.",
                    )
                ctx.console.print_debug(f"[{target.name}] {entry.variable}={found}", level=1)
                values[entry.variable] = found
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(render_env(values), encoding="utf-8")
            except OSError as e:
                ctx.checks.fail(f"File '{step.path}' exists")
                raise VerificationFailed(target=target.name, step=step.name, message=str(e)) from e
            written = True
        cache.mark_file_done(step.path)

    ctx.checks.ok(path.is_file(), f"File '{step.path}' exists")
    return written
