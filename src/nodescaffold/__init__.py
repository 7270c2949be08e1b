from .dsl import cmd, install, mkdir, patch, env_file, locate, target
from .runner import setup_target, run_targets
from .model import Target, RunCommand, InstallFile, EnsureDirectory

__all__ = [
    "cmd", "install", "mkdir", "patch", "env_file", "locate", "target",
    "setup_target", "run_targets",
    "Target", "RunCommand", "InstallFile", "EnsureDirectory",
]
