# process.py
# The single place where external commands are spawned.
# Every caller passes an explicit working directory and environment map, so
# nothing here depends on (or changes) the process-wide cwd or os.environ.

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence


def format_argv(argv: Sequence[str]) -> str:
    """Canonical one-line form of a command, also used as its cache key."""
    return " ".join(argv)


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

class ProcessError(Exception):
    """Base class for a command that did not run to a zero exit status."""

    def __init__(self, argv: Sequence[str]):
        self.argv = list(argv)
        super().__init__(str(self))

    @property
    def cmd(self) -> str:
        return format_argv(self.argv)

    def reason(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return f"{self.cmd}\n{self.reason()}"


class SpawnFailure(ProcessError):
    def __init__(self, argv: Sequence[str], reason: str):
        self._reason = reason
        super().__init__(argv)

    def reason(self) -> str:
        return f"Failed to execute: {self._reason}"


class NonZeroExit(ProcessError):
    def __init__(self, argv: Sequence[str], code: int):
        self.code = code
        super().__init__(argv)

    def reason(self) -> str:
        return f"Child exited with value {self.code}"


class SignalDeath(ProcessError):
    def __init__(self, argv: Sequence[str], signal: int, coredump: bool = False):
        self.signal = signal
        self.coredump = coredump
        super().__init__(argv)

    def reason(self) -> str:
        return "Child died with signal %d, %s coredump" % (
            self.signal,
            "with" if self.coredump else "without",
        )


# ----------------------------------------------------------------------
# Execution
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class ProcessResult:
    argv: tuple
    returncode: int
    stdout: Optional[str] = None
    stderr: Optional[str] = None

    def stdout_lines(self) -> list[str]:
        return (self.stdout or "").splitlines()


def which(tool: str, env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Resolve `tool` on the PATH of `env` (defaults to the current PATH)."""
    path = None
    if env is not None:
        path = env.get("PATH", os.defpath)
    return shutil.which(tool, path=path)


def _resolve_executable(argv: Sequence[str], env: Optional[Mapping[str, str]]) -> str:
    exe = argv[0]
    # explicit paths are spawned as given
    if os.sep in exe or (os.altsep and os.altsep in exe):
        return exe
    # resolve through PATH so Windows shims (npm.cmd, npx.cmd) are found
    resolved = which(exe, env)
    if resolved is None:
        raise SpawnFailure(argv, f"'{exe}' not found in the PATH")
    return resolved


def check_status(argv: Sequence[str], returncode: int) -> None:
    """Map a subprocess return code to success or a ProcessError."""
    if returncode < 0:
        # subprocess reports death-by-signal as -signum; core dump status is not exposed
        raise SignalDeath(argv, -returncode)
    if returncode != 0:
        raise NonZeroExit(argv, returncode)


def run_process(
    argv: Sequence[str],
    *,
    cwd: str | Path,
    env: Optional[Dict[str, str]] = None,
    capture: bool = False,
) -> ProcessResult:
    """
    Run `argv` to completion in `cwd` with environment `env`.

    Output passes through to the terminal unless `capture` is set, in which case
    stdout/stderr are collected and returned.

    Raises:
        SpawnFailure: the command could not be started
        NonZeroExit: the command exited with a nonzero status
        SignalDeath: the command was killed by a signal
    """
    if not argv:
        raise ValueError("run_process() needs at least a program name")

    exe = _resolve_executable(argv, env)

    try:
        proc = subprocess.run(
            [exe, *argv[1:]],
            shell=False,
            cwd=str(cwd),
            env=env,
            text=True,
            capture_output=capture,
        )
    except OSError as e:
        # FileNotFoundError, PermissionError, exec format errors, bad cwd
        raise SpawnFailure(argv, e.strerror or str(e)) from e

    check_status(argv, proc.returncode)

    return ProcessResult(
        argv=tuple(argv),
        returncode=proc.returncode,
        stdout=proc.stdout if capture else None,
        stderr=proc.stderr if capture else None,
    )
