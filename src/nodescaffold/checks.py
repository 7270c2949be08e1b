"""Verification tally: every provisioning step records one pass/fail check."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .ui.console import Console, get_console


@dataclass(frozen=True)
class CheckResult:
    number: int
    passed: bool
    description: str


@dataclass
class Checks:
    """
    Ordered list of verification checks.

    `ok()` prints each result as it is recorded, so progress is visible
    while long generator commands run.
    """
    console: Optional[Console] = None
    results: List[CheckResult] = field(default_factory=list)

    def ok(self, passed: bool, description: str) -> bool:
        result = CheckResult(len(self.results) + 1, bool(passed), description)
        self.results.append(result)
        (self.console or get_console()).print_check(result.number, result.passed, description)
        return result.passed

    def fail(self, description: str) -> bool:
        return self.ok(False, description)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def all_passed(self) -> bool:
        return self.failed == 0
