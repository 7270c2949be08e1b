from __future__ import annotations

from typing import Callable, Dict

from ..model import EnsureDirectory, InstallFile, PatchFile, RunCommand, WriteEnvFile
from . import command, directory, envfile, patch, template

# step type -> run_step(target, step, base, cache, ctx) -> bool (work done now)
STEP_RUNNERS: Dict[type, Callable] = {
    RunCommand: command.run_step,
    InstallFile: template.run_step,
    EnsureDirectory: directory.run_step,
    PatchFile: patch.run_step,
    WriteEnvFile: envfile.run_step,
}
