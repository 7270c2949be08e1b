# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ScaffoldError(Exception):
    """
    Structured, run-aborting error with enough context for:
      - clean CLI output
      - naming the failing target/step
      - debugging without full tracebacks
    """
    kind: str
    target: str
    step: str | None
    message: str
    details: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.target:
            lines.append(f"target={self.target}")
        if self.step:
            lines.append(f"step={self.step}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class StepFailure(ScaffoldError):
    """A driven external command failed (spawn failure, nonzero exit, signal)."""

    def __init__(self, target: str, step: str, cmd: str, reason: str):
        super().__init__(
            kind="step_failed",
            target=target,
            step=step,
            message=f"Can not run '{cmd}': {reason}",
            details={"cmd": cmd},
        )


class MissingTemplate(ScaffoldError):
    """A template source file is absent: a packaging defect."""

    def __init__(self, target: str, step: str, path: str):
        super().__init__(
            kind="missing_template",
            target=target,
            step=step,
            message=f"Template file ({path}) does not exist",
            details={"template": path},
        )


class MissingPrerequisite(ScaffoldError):
    """A required tool is absent or too old."""

    def __init__(self, tool: str, message: str, hint: str | None = None):
        details = {"tool": tool}
        if hint:
            details["hint"] = hint
        super().__init__(
            kind="missing_prerequisite",
            target="",
            step=None,
            message=message,
            details=details,
        )


class VerificationFailed(ScaffoldError):
    """A step ran but its postcondition does not hold."""

    def __init__(self, target: str, step: str, message: str):
        super().__init__(
            kind="verification_failed",
            target=target,
            step=step,
            message=message,
        )


class CorruptCache(ScaffoldError):
    """A step cache record exists but cannot be read."""

    def __init__(self, target: str, path: str, reason: str):
        super().__init__(
            kind="corrupt_cache",
            target=target,
            step=None,
            message=f"Cannot read step cache {path}: {reason}",
            details={
                "record": path,
                "hint": f"Delete {path} or rerun with --init to start {target}/ over.",
            },
        )
