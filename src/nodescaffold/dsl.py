# src/nodescaffold/dsl.py
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .model import EnsureDirectory, EnvEntry, InstallFile, PatchFile, RunCommand, Step, Target, WriteEnvFile


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def cmd(*argv: str, platforms: Optional[Iterable[str]] = None) -> RunCommand:
    """Create a command step: cmd("npm", "install")."""
    if not argv:
        raise ValueError("cmd() needs at least a program name")
    return RunCommand(argv=tuple(argv), platforms=tuple(platforms) if platforms else None)


def install(subdir: str, destination: str = "", template: Optional[str] = None, *, match: Optional[str] = None) -> InstallFile:
    """
    Create a template install step.

        install("src", "App.js")
        install("migrations", template="create-video-conversion.js", match="*-create-video-conversion.js")
    """
    if not destination and not match:
        raise ValueError("install() needs a destination or a match pattern")
    if match and not template:
        raise ValueError("install(match=...) needs an explicit template name")
    return InstallFile(subdir=subdir, destination=destination, template=template, match=match)


def mkdir(path: str) -> EnsureDirectory:
    return EnsureDirectory(path=path)


def patch(path: str, line: str, replacement: str) -> PatchFile:
    return PatchFile(path=path, line=line, replacement=replacement)


def env_file(path: str, *entries: EnvEntry) -> WriteEnvFile:
    if not entries:
        raise ValueError(f"env_file({path!r}) needs at least one entry")
    return WriteEnvFile(path=path, entries=tuple(entries))


def locate(variable: str, executable: str, search_root: str, *, use_path: bool = True) -> EnvEntry:
    return EnvEntry(variable=variable, executable=executable, search_root=search_root, use_path=use_path)


# ---------------------------------------------------------------------
# Target helper
# ---------------------------------------------------------------------

def target(
    name: str,
    *steps: Step,
    bootstrap: Optional[List[Step]] = None,
    env: Optional[Dict[str, str]] = None,
) -> Target:
    if not steps:
        raise ValueError(f"target({name!r}) must have at least one step")

    return Target(name=name, steps=list(steps), bootstrap=list(bootstrap or []), env=dict(env or {}))
